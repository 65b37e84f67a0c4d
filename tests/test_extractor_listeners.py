from balcloud.extractor import extract_intent
from balcloud.extractor.listeners import (
    parse_http_config,
    recognize_int_constant,
    recognize_listener_configuration,
    recognize_module_listener,
)
from balcloud.syntax import parse_module


def _first(source):
    return parse_module(source).members[0]


def test_module_listener_with_literal_port():
    listener = recognize_module_listener(_first("http:Listener helloEp = check new (9090);"), {})
    assert listener.name == "helloEp"
    assert listener.port == 9090
    assert listener.config is None


def test_module_listener_requires_check():
    assert recognize_module_listener(_first("http:Listener ep = new (9090);"), {}) is None


def test_listener_declaration_with_named_port():
    listener = recognize_module_listener(_first("listener http:Listener ep = new (port = 8080);"), {})
    assert listener.port == 8080


def test_listener_port_from_name_reference():
    listener = recognize_module_listener(_first("listener http:Listener ep = new (servicePort);"), {})
    assert listener.port == 0
    assert listener.port_ref == "servicePort"


def test_other_listener_types_are_ignored():
    assert recognize_module_listener(_first("grpc:Listener ep = check new (9090);"), {}) is None
    assert recognize_module_listener(_first("int ep = 5;"), {}) is None


def test_secure_socket_with_cert_and_key():
    source = """
listener http:Listener secureEp = new (9095, {
    secureSocket: {
        key: {
            certFile: "/path/cert.pem",
            keyFile: "/path/key.pem"
        }
    }
});
"""
    listener = recognize_module_listener(_first(source), {})
    assert listener.port == 9095
    assert listener.config.secure_socket.cert_file == "/path/cert.pem"
    assert listener.config.secure_socket.key_file == "/path/key.pem"
    assert listener.config.secure_socket.path is None
    assert listener.config.mutual_ssl is None


def test_mutual_ssl_cert_forms():
    nested = _first('http:ListenerConfiguration c = {secureSocket: {key: {path: "ks.p12"}, '
                    'mutualSsl: {cert: {path: "ts.p12", password: "x"}}}};')
    name, config = recognize_listener_configuration(nested)
    assert name == "c"
    assert config.secure_socket.path == "ks.p12"
    assert config.mutual_ssl.path == "ts.p12"

    direct = _first('http:ListenerConfiguration c = {secureSocket: {mutualSsl: {cert: "ca.crt"}}};')
    _, config = recognize_listener_configuration(direct)
    assert config.mutual_ssl.path == "ca.crt"
    assert config.secure_socket is None


def test_listener_configuration_without_secure_socket_is_ignored():
    decl = _first("http:ListenerConfiguration c = {timeout: 30};")
    assert recognize_listener_configuration(decl) is None


def test_parse_http_config_rejects_non_mapping():
    assert parse_http_config(None) is None
    assert parse_http_config(_first("int x = 1;").initializer) is None


def test_int_constants():
    assert recognize_int_constant(_first("const PORT = 9090;")) == ("PORT", 9090)
    assert recognize_int_constant(_first("configurable int port = 0x10;")) == ("port", 16)
    assert recognize_int_constant(_first("configurable int port = ?;")) is None
    assert recognize_int_constant(_first('configurable string host = "x";')) is None


def test_named_config_declared_after_listener_resolves():
    source = """
listener http:Listener ep = new (9443, tlsConfig);
http:ListenerConfiguration tlsConfig = {
    secureSocket: {key: {certFile: "./resources/cert.pem", keyFile: "./resources/key.pem"}}
};
"""
    intent = extract_intent(parse_module(source))
    listener = intent.listeners[0]
    assert listener.config is intent.listener_configs["tlsConfig"]
    assert listener.config.files() == ["./resources/cert.pem", "./resources/key.pem"]


def test_unknown_config_name_leaves_listener_without_tls():
    intent = extract_intent(parse_module("listener http:Listener ep = new (9443, missing);"))
    assert intent.listeners[0].config is None
    assert intent.tls_configs() == {}
