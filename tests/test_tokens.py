from postfix_ide.core.positions import Position
from postfix_ide.core.tokens import TokenKind, TokenStream, is_type_symbol, symbol_name, token_at, tokenize


def kinds(source):
    return [tok.kind for tok in tokenize(source)]


def test_loop_program_token_positions():
    tokens = list(tokenize("1 i! { i println i 1 + i! } loop"))
    assert [(tok.text, tok.col) for tok in tokens] == [
        ("1", 0),
        ("i", 2),
        ("!", 3),
        ("{", 5),
        ("i", 7),
        ("println", 9),
        ("i", 17),
        ("1", 19),
        ("+", 21),
        ("i", 23),
        ("!", 24),
        ("}", 26),
        ("loop", 28),
    ]
    println = tokens[5]
    assert println.kind == TokenKind.REFERENCE
    assert (println.line, println.col, println.end_col) == (0, 9, 16)


def test_word_classification():
    assert kinds("12 -3 1.5 2e-3 true nil x :Int name: -> ,") == [
        TokenKind.NUMBER,
        TokenKind.NUMBER,
        TokenKind.FLOAT,
        TokenKind.FLOAT,
        TokenKind.BOOLEAN,
        TokenKind.NIL,
        TokenKind.REFERENCE,
        TokenKind.SYMBOL,
        TokenKind.SYMBOL,
        TokenKind.RIGHT_ARROW,
        TokenKind.SEPARATOR,
    ]


def test_brackets_and_comments_are_skipped_correctly():
    source = "# line comment\n( #< outer #< inner >#  still ># ) [ ] { }"
    assert kinds(source) == [
        TokenKind.PARAM_LIST_START,
        TokenKind.PARAM_LIST_END,
        TokenKind.ARR_START,
        TokenKind.ARR_END,
        TokenKind.EXEARR_START,
        TokenKind.EXEARR_END,
    ]
    assert list(tokenize(source))[0].line == 1


def test_strings_with_escapes_and_line_breaks():
    tokens = list(tokenize('"a\\"b" "two\nlines" x'))
    assert tokens[0].kind == TokenKind.STRING
    assert tokens[0].text == 'a"b'
    assert tokens[1].kind == TokenKind.STRING
    assert (tokens[1].line, tokens[1].end_line) == (0, 1)
    assert tokens[2].start == Position(1, 7)


def test_unterminated_string_is_invalid_and_never_raises():
    tokens = list(tokenize('1 "open'))
    assert tokens[-1].kind == TokenKind.INVALID
    assert tokens[-1].text == '"open'


def test_token_stream_is_restartable():
    stream = TokenStream("a b c")
    assert [tok.text for tok in stream] == ["a", "b", "c"]
    assert [tok.text for tok in stream] == ["a", "b", "c"]
    assert len(stream.list()) == 3


def test_token_at_prefers_the_token_starting_at_the_position():
    tokens = list(tokenize("ab cd [a] i!"))
    assert token_at(tokens, Position(0, 0)).text == "ab"
    assert token_at(tokens, Position(0, 4)).text == "cd"
    assert token_at(tokens, Position(0, 7)).text == "a"
    assert token_at(tokens, Position(0, 11)).kind == TokenKind.DEFINITION
    assert token_at(tokens, Position(1, 0)) is None


def test_token_at_falls_back_to_a_token_ending_at_the_position():
    tokens = list(tokenize("ab cd"))
    assert token_at(tokens, Position(0, 2)).text == "ab"
    assert token_at(tokens, Position(0, 5)).text == "cd"


def test_symbol_helpers():
    assert is_type_symbol(":Int")
    assert not is_type_symbol(":int")
    assert not is_type_symbol(":")
    tok = list(tokenize("name:"))[0]
    assert symbol_name(tok) == "name"
