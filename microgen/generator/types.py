"""Type definitions for schema descriptors and code generation."""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin


class GenerationError(RuntimeError):
    """Raised when bindings cannot be generated for a schema."""


class Flavor(StrEnum):
    """Binding flavor of a method, derived from its streaming flags."""

    UNARY = auto()
    CLIENT_STREAMING = auto()
    SERVER_STREAMING = auto()
    BIDI_STREAMING = auto()

    @classmethod
    def of(cls, client_streaming: bool, server_streaming: bool) -> "Flavor":
        if client_streaming and server_streaming:
            return cls.BIDI_STREAMING
        if client_streaming:
            return cls.CLIENT_STREAMING
        if server_streaming:
            return cls.SERVER_STREAMING
        return cls.UNARY


@dataclass
class ProtoMethod(DataClassJsonMixin):
    """Represents an RPC method of a service.

    input_type/output_type are type references as found in the schema:
    fully qualified (".pkg.Msg") or relative to the file package ("Msg").
    """

    name: str
    input_type: str
    output_type: str
    client_streaming: bool
    server_streaming: bool
    comment: str | None

    @property
    def flavor(self) -> Flavor:
        return Flavor.of(self.client_streaming, self.server_streaming)


@dataclass
class ProtoService(DataClassJsonMixin):
    """Represents a service definition."""

    name: str
    methods: list[ProtoMethod]
    comment: str | None


@dataclass
class ProtoMessage(DataClassJsonMixin):
    """Represents a message declaration.

    The name is relative to the file package; nested messages are dotted
    ("Outer.Inner").
    """

    name: str


@dataclass
class ProtoFile(DataClassJsonMixin):
    """Represents a compiled schema file."""

    name: str
    package: str
    go_package: str | None
    dependencies: list[str]
    messages: list[ProtoMessage]
    services: list[ProtoService]

    def full_name(self, message: ProtoMessage) -> str:
        """Return the fully-qualified name of a message declared in this file."""
        if self.package:
            return f".{self.package}.{message.name}"
        return f".{message.name}"

    def full_names(self) -> Iterator[str]:
        for message in self.messages:
            yield self.full_name(message)


@dataclass(frozen=True)
class NamingContext(DataClassJsonMixin):
    """Naming inputs fixed for a generation run."""

    subject_prefix: str
    package_alias: str
