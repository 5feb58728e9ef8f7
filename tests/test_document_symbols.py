from postfix_ide.core.positions import Position
from postfix_ide.core.tokens import tokenize
from postfix_ide.services.datadef import Datadef, datadef_function_names, datadef_functions
from postfix_ide.services.builtin_catalog import ParamDoc
from postfix_ide.services.document_symbols import collect_symbols, find_params_lists, read_params_list


def symbols_of(source):
    return collect_symbols(list(tokenize(source)))


def test_function_declaration_with_params_and_returns():
    symbols = symbols_of("add: (a :Int b :Int -> :Int) { a b + } fun")
    assert [fn.name for fn in symbols.functions] == ["add"]
    fn = symbols.functions[0]
    assert fn.position == Position(0, 0)
    assert [(p.name, p.type) for p in fn.params] == [("a", ":Int"), ("b", ":Int")]
    assert [r.type for r in fn.returns] == [":Int"]
    assert symbols.variables == []


def test_function_without_param_list():
    symbols = symbols_of("greet: { \"hi\" println } fun")
    assert [fn.name for fn in symbols.functions] == ["greet"]
    assert symbols.scopes[0].kind == "fun"


def test_lambda_scope_params():
    symbols = symbols_of("(x) { x 1 + } lam")
    assert symbols.functions == []
    assert symbols.scopes[0].params == frozenset({"x"})
    assert symbols.scopes[0].kind == "lam"


def test_variables_from_definitions_and_symbols():
    symbols = symbols_of("1 i! count: 0 !")
    assert [var.name for var in symbols.variables] == ["i", "count"]


def test_params_list_must_close_before_another_bracket():
    tokens = list(tokenize("( a [ b ) ]"))
    assert read_params_list(tokens, 0) is None
    assert find_params_lists(tokens) == []


def test_struct_datadef_functions():
    symbols = symbols_of("Point: (x :Int y :Int) datadef")
    assert [d.name for d in symbols.datadefs] == [":Point"]
    names = datadef_function_names(symbols.datadefs[0])
    assert names == [
        "point",
        "point?",
        "point-x",
        "point-y",
        "point-x-set",
        "point-y-set",
        "point-x-do",
        "point-y-do",
    ]
    assert symbols.variables == []


def test_union_datadef_declares_members():
    symbols = symbols_of("Shape: [ Circle: (r :Num) Square: (s :Num) ] datadef")
    assert [(d.name, d.kind) for d in symbols.datadefs] == [
        (":Shape", "union"),
        (":Circle", "struct"),
        (":Square", "struct"),
    ]
    assert datadef_function_names(symbols.datadefs[0]) == ["shape?"]


def test_datadef_docs_describe_generated_functions():
    datadef = Datadef(name=":Point", kind="struct", fields=(ParamDoc("x", ":Int"),))
    docs = {doc.name: doc for doc in datadef_functions(datadef)}
    assert docs["point"].returns[0].type == ":Point"
    assert docs["point?"].returns[0].type == ":Bool"
    assert "point-x-set" in docs
    assert "point-x-do" in docs
