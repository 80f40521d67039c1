"""Adapters over schema descriptors.

Wraps the descriptor model with what the generator needs to know about it:
exported identifiers, streaming flags, and type references resolved to the
Go names the generated code uses.
"""

import posixpath
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from google.protobuf.descriptor_pb2 import DescriptorProto, FileDescriptorProto

from .types import (
    Flavor,
    GenerationError,
    ProtoFile,
    ProtoMessage,
    ProtoMethod,
    ProtoService,
)
from .util import sanitize_identifier, to_camel_case, to_camel_case_dotted, unexport

# Field numbers used in SourceCodeInfo location paths
_FILE_SERVICE_FIELD = 6
_SERVICE_METHOD_FIELD = 2


class UnresolvedTypeError(GenerationError):
    """Raised when a type reference names a type that was never declared."""


@dataclass(frozen=True)
class GoImport:
    """An import of the generated file."""

    alias: str
    path: str


def go_package_name(file: ProtoFile) -> str:
    """Return the Go package name of a schema file."""
    if file.go_package:
        path, _, alias = file.go_package.partition(";")
        if alias:
            return alias
        return sanitize_identifier(posixpath.basename(path))
    if file.package:
        return sanitize_identifier(file.package.replace(".", "_"))
    base = posixpath.basename(file.name)
    return sanitize_identifier(base.removesuffix(".proto"))


def go_import(file: ProtoFile, import_prefix: str = "") -> GoImport:
    """Return the import under which the Go code of a schema file lives."""
    if file.go_package:
        path = file.go_package.partition(";")[0]
    else:
        path = posixpath.dirname(file.name) or "."
    return GoImport(alias=go_package_name(file), path=posixpath.join(import_prefix, path))


def exported_name(raw: str, reserved: Mapping[str, bool]) -> str:
    """Camel-case an identifier, disambiguating reserved words."""
    name = to_camel_case(raw)
    if reserved.get(name):
        name += "_"
    return name


def unexported_name(ident: str) -> str:
    return unexport(ident)


class TypeResolver:
    """Resolve type references of one schema file to Go type names."""

    def __init__(self, files: Iterable[ProtoFile], current: ProtoFile, import_prefix: str = ""):
        self.current = current
        self.import_prefix = import_prefix
        self._types: dict[str, tuple[ProtoFile, ProtoMessage]] = {}
        for file in [*files, current]:
            for full_name, message in zip(file.full_names(), file.messages):
                self._types[full_name] = (file, message)

        self._own_path = go_import(current, import_prefix).path
        self._imports: dict[str, GoImport] = {}

    @property
    def imports(self) -> list[GoImport]:
        """Imports recorded by resolve_type_name, sorted by path."""
        return sorted(self._imports.values(), key=lambda imp: imp.path)

    def _candidates(self, ref: str) -> list[str]:
        if ref.startswith("."):
            return [ref]

        # Search from the innermost package scope outwards
        scope = self.current.package.split(".") if self.current.package else []
        candidates = []
        for i in range(len(scope), -1, -1):
            candidates.append("." + ".".join([*scope[:i], ref]))
        return candidates

    def lookup(self, ref: str) -> tuple[ProtoFile, ProtoMessage]:
        """Find the file and message a type reference names."""
        for candidate in self._candidates(ref):
            found = self._types.get(candidate)
            if found is not None:
                return found
        raise UnresolvedTypeError(f"{self.current.name}: type {ref} is not declared")

    def resolve_type_name(self, ref: str) -> str:
        """Return the Go name of a referenced type, recording its import."""
        file, message = self.lookup(ref)
        name = to_camel_case_dotted(message.name)

        imp = go_import(file, self.import_prefix)
        if imp.path == self._own_path:
            return name

        self._imports.setdefault(imp.path, imp)
        return f"{self._imports[imp.path].alias}.{name}"


class MethodAdapter:
    """Generator view of a method descriptor."""

    def __init__(
        self, method: ProtoMethod, resolver: TypeResolver, reserved: Mapping[str, bool]
    ):
        self.method = method
        self._resolver = resolver

        # Undeclared types abort generation, whether or not they are printed
        resolver.lookup(method.input_type)
        resolver.lookup(method.output_type)

        self.name = exported_name(method.name, reserved)
        self.wire_name = to_camel_case(method.name)

    @property
    def input_type(self) -> str:
        return self._resolver.resolve_type_name(self.method.input_type)

    @property
    def output_type(self) -> str:
        return self._resolver.resolve_type_name(self.method.output_type)

    @property
    def client_streaming(self) -> bool:
        return self.method.client_streaming

    @property
    def server_streaming(self) -> bool:
        return self.method.server_streaming

    @property
    def flavor(self) -> Flavor:
        return self.method.flavor

    @property
    def comment(self) -> str | None:
        return self.method.comment


class ServiceAdapter:
    """Generator view of a service descriptor."""

    def __init__(
        self, service: ProtoService, resolver: TypeResolver, reserved: Mapping[str, bool]
    ):
        self.service = service
        self.name = to_camel_case(service.name)
        self.methods = [MethodAdapter(m, resolver, reserved) for m in service.methods]

    @property
    def comment(self) -> str | None:
        return self.service.comment


def _nested_messages(prefix: str, message: DescriptorProto) -> list[ProtoMessage]:
    name = f"{prefix}.{message.name}" if prefix else message.name
    messages = [ProtoMessage(name=name)]
    for nested in message.nested_type:
        if nested.options.map_entry:
            continue
        messages.extend(_nested_messages(name, nested))
    return messages


def _leading_comments(fd: FileDescriptorProto) -> dict[tuple[int, ...], str]:
    comments: dict[tuple[int, ...], str] = {}
    for location in fd.source_code_info.location:
        if location.leading_comments:
            comments[tuple(location.path)] = location.leading_comments.removesuffix("\n")
    return comments


def file_from_descriptor(fd: FileDescriptorProto) -> ProtoFile:
    """Convert a compiled protobuf file descriptor to the schema model."""
    comments = _leading_comments(fd)

    messages: list[ProtoMessage] = []
    for message in fd.message_type:
        messages.extend(_nested_messages("", message))

    services = []
    for i, service in enumerate(fd.service):
        methods = [
            ProtoMethod(
                name=method.name,
                input_type=method.input_type,
                output_type=method.output_type,
                client_streaming=method.client_streaming,
                server_streaming=method.server_streaming,
                comment=comments.get((_FILE_SERVICE_FIELD, i, _SERVICE_METHOD_FIELD, j)),
            )
            for j, method in enumerate(service.method)
        ]
        services.append(
            ProtoService(
                name=service.name,
                methods=methods,
                comment=comments.get((_FILE_SERVICE_FIELD, i)),
            )
        )

    return ProtoFile(
        name=fd.name,
        package=fd.package,
        go_package=fd.options.go_package or None,
        dependencies=list(fd.dependency),
        messages=messages,
        services=services,
    )
