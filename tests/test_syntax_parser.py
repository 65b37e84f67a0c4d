from balcloud.syntax import SyntaxKind, parse_module
from balcloud.syntax.lexer import NUMBER, STRING, TEMPLATE, tokenize


def test_tokenize_drops_comments_and_keeps_literals():
    tokens = tokenize('// comment\n# doc\nint x = 0x1F; string s = "a;b"; string t = `x${y}`;')
    texts = [t.text for t in tokens]
    assert "comment" not in " ".join(texts)
    assert any(t.type == NUMBER and t.text == "0x1F" for t in tokens)
    assert any(t.type == STRING and t.text == '"a;b"' for t in tokens)
    assert any(t.type == TEMPLATE for t in tokens)


def test_imports():
    module = parse_module("import ballerina/http;\nimport ballerina/lang.'int as ints;\n")
    imports = module.imports()
    assert [i.module_name for i in imports] == ["http", "lang.int"]
    assert imports[0].org_name == "ballerina"
    assert imports[0].effective_prefix == "http"
    assert imports[1].prefix == "ints"


def test_module_listener_with_check_new():
    module = parse_module("http:Listener ep = check new (9090);")
    decl = module.members[0]
    assert decl.kind == SyntaxKind.MODULE_VAR_DECL
    type_desc = decl.typed_binding_pattern.type_descriptor
    assert (type_desc.module_prefix, type_desc.identifier) == ("http", "Listener")
    assert decl.typed_binding_pattern.binding_pattern.variable_name == "ep"
    init = decl.initializer
    assert init.kind == SyntaxKind.CHECK_EXPRESSION
    assert init.expression.kind == SyntaxKind.IMPLICIT_NEW_EXPRESSION
    assert init.expression.arguments[0].expression.text == "9090"


def test_listener_declaration_and_const():
    module = parse_module("const PORT = 8080;\nlistener http:Listener ep = new (PORT);\n")
    const, listener = module.members
    assert const.kind == SyntaxKind.CONST_DECLARATION
    assert const.variable_name == "PORT"
    assert listener.kind == SyntaxKind.LISTENER_DECLARATION
    assert listener.variable_name == "ep"
    arg = listener.initializer.arguments[0]
    assert arg.expression.kind == SyntaxKind.SIMPLE_NAME_REFERENCE
    assert arg.expression.name == "PORT"


def test_service_with_resources():
    source = """
service /hello/world on new http:Listener(9090) {
    resource function get greeting(string name) returns string {
        return "Hello " + name;
    }
    resource function post .() returns error? {
    }
    remote function onMessage() {
    }
}
"""
    service = parse_module(source).members[0]
    assert service.kind == SyntaxKind.SERVICE_DECLARATION
    assert [p.kind for p in service.absolute_resource_path] == [
        SyntaxKind.SLASH_TOKEN, SyntaxKind.IDENTIFIER_TOKEN,
        SyntaxKind.SLASH_TOKEN, SyntaxKind.IDENTIFIER_TOKEN,
    ]
    expr = service.expressions[0]
    assert expr.kind == SyntaxKind.EXPLICIT_NEW_EXPRESSION
    assert expr.type_descriptor.identifier == "Listener"

    kinds = [m.kind for m in service.members]
    assert kinds == [
        SyntaxKind.RESOURCE_ACCESSOR_DEFINITION,
        SyntaxKind.RESOURCE_ACCESSOR_DEFINITION,
        SyntaxKind.OBJECT_METHOD_DEFINITION,
    ]
    assert service.members[0].function_name == "get"
    assert service.members[1].relative_resource_path[0].kind == SyntaxKind.DOT_TOKEN


def test_annotated_main_function():
    source = '@cloud:Task {schedule: {minutes: "0"}}\npublic function main() {\n}\n'
    func = parse_module(source).members[0]
    assert func.kind == SyntaxKind.FUNCTION_DEFINITION
    assert func.function_name == "main"
    assert func.qualifiers == ["public"]
    annotation = func.metadata.annotations[0]
    assert annotation.annot_reference.module_prefix == "cloud"
    assert annotation.annot_value.kind == SyntaxKind.MAPPING_CONSTRUCTOR


def test_skips_types_and_classes():
    source = """
type Person record {| string name; int age; |};
class Counter {
    int count = 0;
    function inc() { self.count += 1; }
}
int total = 10;
"""
    members = parse_module(source).members
    assert len(members) == 1
    assert members[0].typed_binding_pattern.binding_pattern.variable_name == "total"


def test_malformed_input_does_not_raise():
    module = parse_module("service on { ;; } ) ] listener = ; function (")
    assert module.kind == SyntaxKind.MODULE_PART


def test_unrecognized_expression_is_opaque():
    decl = parse_module("int x = a + b * 2;").members[0]
    assert decl.initializer.kind == SyntaxKind.OPAQUE_EXPRESSION
