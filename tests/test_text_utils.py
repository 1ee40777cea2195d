from thrift_tools.models import Range
from thrift_tools.parser.text_utils import (
    collapse_whitespace,
    find_unquoted,
    normalize_generics,
    normalize_signature,
    normalize_type,
    scan_brackets,
    slice_text_by_range,
    split_line_comment,
    split_field_runs,
    split_separated_parts,
    split_trailing_annotation,
    strip_trailing_separator,
)


class TestNormalizeType:
    def test_spaces_around_generic_punctuation(self):
        assert normalize_type("map < string , i32 >") == "map<string,i32>"

    def test_nested(self):
        assert normalize_type("list< map< string ,list <i32 > > >") == "list<map<string,list<i32>>>"

    def test_plain_type_untouched(self):
        assert normalize_type("  i64 ") == "i64"


class TestSplitLineComment:
    def test_slash_comment(self):
        assert split_line_comment("1: i32 id, // the id") == ("1: i32 id, ", "// the id")

    def test_hash_comment(self):
        assert split_line_comment("A = 1 #x") == ("A = 1 ", "#x")

    def test_block_comment(self):
        assert split_line_comment("A = 1 /* one */") == ("A = 1 ", "/* one */")

    def test_markers_inside_strings_ignored(self):
        text = '1: string url = "http://x#y"'
        assert split_line_comment(text) == (text, "")


class TestSplitTrailingAnnotation:
    def test_annotation(self):
        assert split_trailing_annotation('i32 id (api.key = "x")') == ("i32 id", '(api.key = "x")')

    def test_nested_parentheses(self):
        assert split_trailing_annotation("x (a = (b))") == ("x", "(a = (b))")

    def test_no_annotation(self):
        assert split_trailing_annotation("i32 id") == ("i32 id", "")

    def test_parenthesis_inside_string(self):
        assert split_trailing_annotation('x = "a)"') == ('x = "a)"', "")


class TestSeparators:
    def test_strip_trailing_separator(self):
        assert strip_trailing_separator("i32 id ,") == ("i32 id", ",")
        assert strip_trailing_separator("i32 id;") == ("i32 id", ";")
        assert strip_trailing_separator("i32 id") == ("i32 id", "")

    def test_split_separated_parts(self):
        parts = split_separated_parts("1:i32 id,2:map<string,i32> m;3:string s")
        assert parts == [("1:i32 id", ","), ("2:map<string,i32> m", ";"), ("3:string s", "")]

    def test_split_ignores_nested_and_quoted(self):
        parts = split_separated_parts('a = [1, 2], b = "x,y"')
        assert parts == [("a = [1, 2]", ","), ('b = "x,y"', "")]

    def test_empty_parts_dropped(self):
        assert split_separated_parts(" , ,") == []

    def test_stray_angle_does_not_close_parenthesis(self):
        parts = split_separated_parts("void ping(), i32 add(1:> i32 a, 2: i32 b) throws (1: Ex e)")
        assert parts == [("void ping()", ","), ("i32 add(1:> i32 a, 2: i32 b) throws (1: Ex e)", "")]

    def test_unclosed_angle_ends_with_its_bracket(self):
        parts = split_separated_parts("f(1: list<i32 a), g()")
        assert parts == [("f(1: list<i32 a)", ","), ("g()", "")]

    def test_split_field_runs(self):
        assert split_field_runs("1: i32 a 2: string b") == ["1: i32 a", "2: string b"]
        assert split_field_runs("-1: i32 a = -1 2 : i32 b") == ["-1: i32 a = -1", "2 : i32 b"]

    def test_split_field_runs_ignores_nested_ids(self):
        text = '1: map<i32,i32> m = {1: 2} (x = "3: y")'
        assert split_field_runs(text) == [text]


class TestScanning:
    def test_scan_brackets_depth(self):
        assert scan_brackets("[1, {2: 3") == (2, None)

    def test_scan_brackets_reports_enclosing_close(self):
        assert scan_brackets("1: i32 x }", 0) == (-1, 9)

    def test_scan_brackets_ignores_strings(self):
        assert scan_brackets('"{{" }') == (-1, 5)

    def test_find_unquoted(self):
        assert find_unquoted('"=" = 1', "=") == 4
        assert find_unquoted("abc", "=") == -1

    def test_collapse_whitespace_keeps_strings(self):
        assert collapse_whitespace('a   b  "c   d"') == 'a b "c   d"'


class TestNormalizeSignature:
    def test_generics(self):
        assert normalize_generics("list < map < string , i32 > > ids") == "list<map<string,i32>> ids"

    def test_space_before_paren_after_generic_dropped(self):
        assert normalize_generics("list<i32> > )") == "list<i32>> )"

    def test_signature_with_comment(self):
        assert normalize_signature("void   ping( )   //   hi") == "void ping( ) //   hi"

    def test_comment_only(self):
        assert normalize_signature("// only") == "// only"


class TestSliceTextByRange:
    def test_single_line(self):
        assert slice_text_by_range("abc def", Range.from_coords(0, 4, 0, 7)) == "def"

    def test_multi_line(self):
        assert slice_text_by_range("ab\ncd\nef", Range.from_coords(0, 1, 2, 1)) == "b\ncd\ne"

    def test_utf16_columns(self):
        text = "\U0001F600 x"
        assert slice_text_by_range(text, Range.from_coords(0, 3, 0, 4)) == "x"
