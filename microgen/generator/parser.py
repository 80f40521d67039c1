"""Schema parser using Lark.

Reads the service-related subset of protobuf schema files into the
descriptor model, for runs that do not go through protoc.
"""

import logging
import os
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from lark import Lark, Token
from lark.visitors import Transformer

from .types import ProtoFile, ProtoMessage, ProtoMethod, ProtoService
from .wellknown import WELL_KNOWN_FILES, is_well_known

logger = logging.getLogger(__name__)

_g_parser: Lark | None = None
_g_comments: list[Token] = []


class ValidationError(RuntimeError):
    """Raised when schema validation fails."""


@dataclass
class _Package:
    value: str


@dataclass
class _Import:
    path: str
    kind: str | None


@dataclass
class _Option:
    name: str
    value: str


@dataclass
class _Message:
    name: str
    nested: list["_Message"]

    def flatten(self, prefix: str = "") -> list[ProtoMessage]:
        name = f"{prefix}.{self.name}" if prefix else self.name
        messages = [ProtoMessage(name=name)]
        for nested in self.nested:
            messages.extend(nested.flatten(name))
        return messages


@dataclass
class _RpcType:
    name: str
    stream: bool


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _unquote(s: str) -> str:
    return s[1:-1]


def _comment_lines(comment: Token) -> list[str]:
    text = str(comment)
    if text.startswith("//"):
        return [text[2:].rstrip()]

    lines = [re.sub(r"^\s*\*(?!/)", "", line).rstrip() for line in text[2:-2].split("\n")]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


class TreeTransformer(Transformer):
    """Transform parse tree into descriptor types."""

    def __init__(self, text: str, comments: list[Token]):
        super().__init__()
        self._text = text
        # Only comments that start their line can lead a declaration
        self._comments = {
            c.end_line: c
            for c in comments
            if not self._text[self._text.rfind("\n", 0, c.start_pos) + 1 : c.start_pos].strip()
        }

    def _leading_comment(self, line: int) -> str | None:
        block: list[Token] = []
        while (comment := self._comments.get(line - 1)) is not None:
            block.insert(0, comment)
            line = comment.line
        if not block:
            return None
        return "\n".join(text for c in block for text in _comment_lines(c))

    def package(self, args: list[Any]) -> _Package:
        return _Package(value=args[0])

    def import_decl(self, args: list[Any]) -> _Import:
        kind = args[0] if len(args) == 2 else None
        return _Import(path=_unquote(args[-1]), kind=kind)

    def import_kind(self, args: list[Any]) -> str:
        return str(args[0])

    def option(self, args: list[Any]) -> _Option:
        return _Option(name=args[0], value=args[1])

    def option_name(self, args: list[Any]) -> str:
        return ".".join(str(a) for a in args)

    def constant(self, args: list[Any]) -> str:
        if isinstance(args[0], Token) and args[0].type == "STRING":
            return "".join(_unquote(a) for a in args)
        return str(args[0])

    def message(self, args: list[Any]) -> _Message:
        return _Message(name=str(args[0]), nested=_filter(args, _Message))

    def rpc_type(self, args: list[Any]) -> _RpcType:
        return _RpcType(name=args[-1], stream=len(args) == 2)

    def rpc(self, args: list[Any]) -> ProtoMethod:
        name, request, response = args[0], args[1], args[2]
        return ProtoMethod(
            name=str(name),
            input_type=request.name,
            output_type=response.name,
            client_streaming=request.stream,
            server_streaming=response.stream,
            comment=self._leading_comment(name.line),
        )

    def service(self, args: list[Any]) -> ProtoService:
        name = args[0]
        return ProtoService(
            name=str(name),
            methods=_filter(args, ProtoMethod),
            comment=self._leading_comment(name.line),
        )

    def type_name(self, args: list[Any]) -> str:
        return "".join(str(a) for a in args)

    def full_ident(self, args: list[Any]) -> str:
        return ".".join(str(a) for a in args)


def validate(file: ProtoFile) -> None:
    """Validate a parsed schema file."""
    seen: set[str] = set()
    for message in file.messages:
        if message.name in seen:
            raise ValidationError(f"{file.name}: message {message.name} declared twice")
        seen.add(message.name)

    services: set[str] = set()
    for service in file.services:
        if service.name in services:
            raise ValidationError(f"{file.name}: service {service.name} declared twice")
        services.add(service.name)

        methods: set[str] = set()
        for method in service.methods:
            if method.name in methods:
                raise ValidationError(
                    f"{file.name}: rpc {service.name}.{method.name} declared twice"
                )
            methods.add(method.name)


def _parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/protodef.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr", lexer_callbacks={"COMMENT": _g_comments.append})
    return _g_parser


def parse(text: str, name: str = "schema.proto") -> ProtoFile:
    """Parse a schema file."""
    parser = _parser()

    _g_comments.clear()
    tree = parser.parse(text)
    comments = list(_g_comments)
    _g_comments.clear()

    items = TreeTransformer(text, comments).transform(tree).children

    package = _filter(items, _Package)
    options = {o.name: o.value for o in _filter(items, _Option)}
    messages = [m for message in _filter(items, _Message) for m in message.flatten()]

    file = ProtoFile(
        name=name,
        package=package[0].value if package else "",
        go_package=options.get("go_package"),
        dependencies=[i.path for i in _filter(items, _Import)],
        messages=messages,
        services=_filter(items, ProtoService),
    )
    validate(file)
    return file


def _import_name(path: Path, roots: Sequence[Path]) -> str:
    for root in roots:
        try:
            return path.resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            continue
    return path.name


def load(path: str | Path, include_paths: Sequence[str | Path] = ()) -> list[ProtoFile]:
    """Load a schema file and everything it imports.

    Imports are looked up in include_paths, or next to the file when none are
    given. Returns dependencies first and the requested file last.
    """
    path = Path(path)
    roots = [Path(p) for p in include_paths] or [path.parent]

    loaded: dict[str, ProtoFile] = {}
    visiting: set[str] = set()

    def visit(name: str, file_path: Path) -> None:
        visiting.add(name)
        logger.debug("Parsing %s", file_path)
        file = parse(file_path.read_text(encoding="utf-8"), name=name)

        for dep in file.dependencies:
            if dep in loaded:
                continue
            if dep in visiting:
                raise ValidationError(f"{name}: import cycle through {dep}")
            if is_well_known(dep):
                loaded[dep] = WELL_KNOWN_FILES[dep]
                continue
            for root in roots:
                if (root / dep).is_file():
                    visit(dep, root / dep)
                    break
            else:
                raise ValidationError(f"{name}: import {dep} not found")

        visiting.discard(name)
        loaded[name] = file

    visit(_import_name(path, roots), path)
    return list(loaded.values())
