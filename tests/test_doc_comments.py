from postfix_ide.core.positions import Position
from postfix_ide.core.tokens import block_comments, tokenize
from postfix_ide.services.doc_comments import attach_doc_comments, parse_doc_comment
from postfix_ide.services.document_symbols import collect_symbols

SQUARE = """#<
Squares a number.
@param x the number
  to square
@return x times x
>#
sq: (x :Num -> :Num) { x x * } fun
"""


def documented(source):
    tokens = list(tokenize(source))
    return collect_symbols(tokens, attach_doc_comments(tokens, block_comments(source)))


def test_parse_description_params_and_returns():
    doc = parse_doc_comment("\nSquares a number.\n\nMore text.\n@param x the number\n@return x times x\n")
    assert doc.description == "Squares a number.\n\nMore text."
    assert doc.params == (("x", "the number"),)
    assert doc.returns == ("x times x",)
    assert doc.param_description("y") == ""


def test_block_comments_keep_their_text_and_position():
    comments = list(block_comments("1 #< outer #< inner ># >#\n2"))
    assert len(comments) == 1
    assert comments[0].text == " outer #< inner ># "
    assert comments[0].start == Position(0, 2)
    assert comments[0].end == Position(0, 25)


def test_doc_comment_documents_the_following_function():
    fn = documented(SQUARE).functions[0]
    assert fn.description == "Squares a number."
    assert [(p.name, p.description) for p in fn.params] == [("x", "the number to square")]
    assert [(r.type, r.description) for r in fn.returns] == [(":Num", "x times x")]
    assert fn.to_doc().description == "Squares a number."


def test_doc_comment_documents_variables():
    symbols = documented("#< Limit ># limit: 10 !\nn: 3 !\n#< Counter >#\ni!")
    assert [(var.name, var.description) for var in symbols.variables] == [
        ("limit", "Limit"),
        ("n", ""),
        ("i", "Counter"),
    ]


def test_doc_comment_separated_by_other_tokens_is_not_attached():
    symbols = documented("#< Squares ># 1 sq: (x) { x x * } fun")
    assert symbols.functions[0].description == ""


def test_unterminated_doc_comment_is_not_attached():
    symbols = documented("sq: (x) { x x * } fun #< dangling")
    assert symbols.functions[0].description == ""
