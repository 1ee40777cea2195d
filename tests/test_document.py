from thrift_tools.document import TextDocument
from thrift_tools.formatter.comment_format import format_block_comment
from thrift_tools.models import Position, Range, code_point_index, utf16_column


class TestUtf16Columns:
    def test_ascii(self):
        assert utf16_column("abc", 2) == 2
        assert code_point_index("abc", 2) == 2

    def test_astral_characters_take_two_units(self):
        text = "a\U0001F600b"
        assert utf16_column(text, 2) == 3
        assert code_point_index(text, 3) == 2
        assert code_point_index(text, 10) == 3


class TestRange:
    def test_half_open_containment(self):
        rng = Range.from_coords(1, 0, 1, 5)
        assert rng.contains(Position(1, 0))
        assert rng.contains(Position(1, 4))
        assert not rng.contains(Position(1, 5))
        assert not rng.contains(Position(0, 9))

    def test_is_empty(self):
        assert Range.from_coords(2, 3, 2, 3).is_empty
        assert not Range.from_coords(2, 3, 2, 4).is_empty

    def test_positions_are_ordered(self):
        assert Position(0, 9) < Position(1, 0) < Position(1, 1)


class TestTextDocument:
    def test_lines(self):
        doc = TextDocument("a\nbb\n")
        assert doc.line_count == 3
        assert doc.line_at(1).text == "bb"
        assert doc.line_at(1).line_number == 1

    def test_get_text_by_range(self):
        doc = TextDocument("struct A {\n  1: i32 a\n}")
        assert doc.get_text(Range.from_coords(1, 2, 1, 8)) == "1: i32"
        assert doc.get_text() == "struct A {\n  1: i32 a\n}"

    def test_offsets_round_trip(self):
        doc = TextDocument("ab\n\U0001F600c\nd")
        for offset in range(len(doc.get_text()) + 1):
            assert doc.offset_at(doc.position_at(offset)) == offset

    def test_position_at_utf16(self):
        doc = TextDocument("ab\n\U0001F600c")
        assert doc.position_at(4) == Position(1, 2)

    def test_crlf_lines(self):
        doc = TextDocument("a\r\nb")
        assert doc.line_at(0).text == "a"
        assert doc.offset_at(Position(1, 0)) == 3

    def test_full_range(self):
        assert TextDocument("a\nbcd").full_range() == Range.from_coords(0, 0, 1, 3)


class TestBlockComment:
    def test_doc_comment_reindented(self):
        lines = ["/**", "* Summary.", "", "details", "*/"]
        assert format_block_comment(lines, "    ") == [
            "    /**",
            "     * Summary.",
            "",
            "       details",
            "     */",
        ]

    def test_single_line(self):
        assert format_block_comment(["  /* one */"], "") == ["/* one */"]
