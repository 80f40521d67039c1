"""Go rendering of service bindings."""

import json

from jinja2 import Environment, PackageLoader

from .descriptors import GoImport
from .printer import Printer
from .signatures import HandlerType, ServiceBinding, Signature, TypeRef
from .types import NamingContext

# Runtime constant passed to every synchronous request
DEFAULT_TIMEOUT = "DefaultTimeout"

env = Environment(
    loader=PackageLoader("microgen.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)


def go_quote(s: str) -> str:
    """Quote a string as a Go string literal."""
    return json.dumps(s)


def go_type(t: TypeRef) -> str:
    """Message values are passed by pointer, stream placeholders by value."""
    if t.stream:
        return t.name
    return f"*{t.name}"


def go_signature(sig: Signature) -> str:
    params = ", ".join(f"{p.name} {go_type(p.type)}" for p in sig.params)
    if sig.result is None:
        return f"{sig.name}({params}) error"
    return f"{sig.name}({params}) ({go_type(sig.result)}, error)"


def go_handler(handler: HandlerType) -> str:
    params = ", ".join(go_type(t) for t in handler.params)
    return f"func({params}) error"


env.filters["go_quote"] = go_quote
env.filters["go_type"] = go_type
env.filters["signature"] = go_signature
env.filters["handler"] = go_handler

header_template = env.get_template("header.go.j2")
client_template = env.get_template("client.go.j2")
server_template = env.get_template("server.go.j2")


def _print_lines(text: str, p: Printer) -> None:
    # Templates may end in blank lines; separators are the caller's business
    for line in text.rstrip("\n").splitlines():
        p(line)


def emit_header(
    source: str, package: str, imports: list[GoImport], plugin: str, p: Printer
) -> None:
    """Emit the file banner, the package clause and the import block."""
    _print_lines(
        header_template.render(source=source, package=package, imports=imports, plugin=plugin),
        p,
    )


def emit_client(binding: ServiceBinding, context: NamingContext, p: Printer) -> None:
    """Emit the client interface, struct, constructor and method bodies."""
    _print_lines(
        client_template.render(s=binding, alias=context.package_alias, timeout=DEFAULT_TIMEOUT),
        p,
    )


def emit_server(binding: ServiceBinding, context: NamingContext, p: Printer) -> None:
    """Emit the handler types and both subscription wiring types."""
    _print_lines(server_template.render(s=binding, alias=context.package_alias), p)
