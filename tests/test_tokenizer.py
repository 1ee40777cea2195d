from thrift_tools.parser.thrift_tokenizer import (
    CommentState,
    ThriftTokenizer,
    TokenType,
    split_lines,
    tokenize_line,
    tokenize_text,
)


def _significant(tokens):
    return [(t.type, t.value) for t in tokens if t.type != TokenType.WHITESPACE]


class TestTokenizeLine:
    def test_struct_header(self):
        tokens = tokenize_line("struct User {")
        assert _significant(tokens) == [
            (TokenType.IDENTIFIER, "struct"),
            (TokenType.IDENTIFIER, "User"),
            (TokenType.SYMBOL, "{"),
        ]

    def test_offsets_are_half_open(self):
        tokens = [t for t in tokenize_line("  i32 id") if t.type != TokenType.WHITESPACE]
        assert (tokens[0].start, tokens[0].end) == (2, 5)
        assert (tokens[1].start, tokens[1].end) == (6, 8)

    def test_whitespace_tokens_cover_the_gaps(self):
        tokens = tokenize_line("a  b")
        assert [(t.type, t.value) for t in tokens] == [
            (TokenType.IDENTIFIER, "a"),
            (TokenType.WHITESPACE, "  "),
            (TokenType.IDENTIFIER, "b"),
        ]

    def test_field_with_default(self):
        tokens = tokenize_line('1: string s = "{x}" }')
        assert _significant(tokens) == [
            (TokenType.NUMBER, "1"),
            (TokenType.SYMBOL, ":"),
            (TokenType.IDENTIFIER, "string"),
            (TokenType.IDENTIFIER, "s"),
            (TokenType.SYMBOL, "="),
            (TokenType.STRING, "{x}"),
            (TokenType.SYMBOL, "}"),
        ]

    def test_string_token_spans_quotes(self):
        tokens = tokenize_line('"abc"')
        assert tokens[0].value == "abc"
        assert (tokens[0].start, tokens[0].end) == (0, 5)

    def test_single_quoted_string_with_escape(self):
        tokens = tokenize_line(r"'it\'s'")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == r"it\'s"

    def test_unterminated_string_runs_to_end_of_line(self):
        tokens = tokenize_line('x = "open { brace')
        assert tokens[-1].type == TokenType.STRING
        assert tokens[-1].value == "open { brace"
        assert tokens[-1].end == len('x = "open { brace')

    def test_numbers(self):
        values = [t.value for t in tokenize_line("0x1F 42 3.14 1e10") if t.type == TokenType.NUMBER]
        assert values == ["0x1F", "42", "3.14", "1e10"]

    def test_hash_comment(self):
        tokens = tokenize_line("i32 x # trailing { brace")
        assert tokens[-1].type == TokenType.COMMENT
        assert tokens[-1].value == "# trailing { brace"

    def test_slash_comment(self):
        tokens = tokenize_line("i32 x // note")
        assert tokens[-1].type == TokenType.COMMENT
        assert tokens[-1].value == "// note"

    def test_inline_block_comment_then_code(self):
        tokens = tokenize_line("/* a { */ struct")
        assert _significant(tokens) == [
            (TokenType.COMMENT, "/* a { */"),
            (TokenType.IDENTIFIER, "struct"),
        ]

    def test_other_characters_are_single_symbols(self):
        assert _significant(tokenize_line("<>,;")) == [
            (TokenType.SYMBOL, "<"),
            (TokenType.SYMBOL, ">"),
            (TokenType.SYMBOL, ","),
            (TokenType.SYMBOL, ";"),
        ]


class TestBlockCommentState:
    def test_open_comment_carries_to_next_line(self):
        tokenizer = ThriftTokenizer()
        tokenizer.tokenize_line("struct A { /* start")
        assert tokenizer.state is CommentState.BLOCK_COMMENT

        tokens = tokenizer.tokenize_line("still { inside */ }")
        assert tokenizer.state is CommentState.CODE
        assert _significant(tokens) == [
            (TokenType.COMMENT, "still { inside */"),
            (TokenType.SYMBOL, "}"),
        ]

    def test_line_fully_inside_comment(self):
        tokenizer = ThriftTokenizer()
        tokenizer.tokenize_line("/*")
        tokens = tokenizer.tokenize_line("  struct Fake {")
        assert [t.type for t in tokens] == [TokenType.COMMENT]
        assert tokenizer.state is CommentState.BLOCK_COMMENT

    def test_empty_line_inside_comment_yields_nothing(self):
        tokenizer = ThriftTokenizer()
        tokenizer.tokenize_line("/**")
        assert tokenizer.tokenize_line("") == []

    def test_inline_close_after_inline_open(self):
        tokenizer = ThriftTokenizer()
        tokenizer.tokenize_line("a /* b */ c")
        assert tokenizer.state is CommentState.CODE


class TestTokenizeText:
    def test_line_numbers(self):
        tokens = [t for t in tokenize_text("a\n\nb") if t.type != TokenType.WHITESPACE]
        assert [(t.value, t.line) for t in tokens] == [("a", 0), ("b", 2)]

    def test_split_lines_drops_carriage_returns(self):
        assert split_lines("a\r\nb\r\n") == ["a", "b", ""]
