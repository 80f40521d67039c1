"""Generator configuration."""

from dataclasses import dataclass, field
from enum import StrEnum, auto

from .types import NamingContext, ProtoFile, ProtoService

DEFAULT_RUNTIME_IMPORT = "github.com/plimble/micro"
DEFAULT_RUNTIME_ALIAS = "micro"

# Identifiers that would clash in the generated client. Colliding method
# names get a trailing "_".
RESERVED_NAMES: dict[str, bool] = {}


class ConfigError(ValueError):
    """Raised when the generator configuration is invalid."""


class StreamingPolicy(StrEnum):
    """What to do with methods that stream in either direction."""

    SHELL = auto()  # Declare signatures, emit empty bodies
    ERROR = auto()  # Refuse to generate


@dataclass
class GeneratorConfig:
    """Settings fixed for one generation run."""

    runtime_import: str = DEFAULT_RUNTIME_IMPORT
    runtime_alias: str = DEFAULT_RUNTIME_ALIAS
    import_prefix: str = ""
    prefix: str | None = None
    streaming: StreamingPolicy = StreamingPolicy.SHELL
    reserved: dict[str, bool] = field(default_factory=lambda: dict(RESERVED_NAMES))

    @classmethod
    def from_parameter(cls, parameter: str) -> "GeneratorConfig":
        """Build a configuration from a protoc plugin parameter string.

        The parameter is a comma separated list of key=value pairs, e.g.
        "prefix=orders,streaming=error,reserved=Close:Reset".
        """
        config = cls()
        for chunk in parameter.split(","):
            if not chunk.strip():
                continue
            key, _, value = chunk.partition("=")
            key = key.strip()
            value = value.strip()

            if key == "runtime_import":
                config.runtime_import = value
            elif key == "runtime_alias":
                config.runtime_alias = value
            elif key == "import_prefix":
                config.import_prefix = value
            elif key == "prefix":
                config.prefix = value or None
            elif key == "streaming":
                config.streaming = parse_streaming(value)
            elif key == "reserved":
                config.reserved.update({name: True for name in value.split(":") if name})
            else:
                raise ConfigError(f"Unknown parameter {key}")

        return config

    def naming_context(self, file: ProtoFile, service: ProtoService) -> NamingContext:
        """Return the naming context used for a service of a file."""
        prefix = self.prefix or file.package or service.name.lower()
        return NamingContext(subject_prefix=prefix, package_alias=self.runtime_alias)


def parse_streaming(value: str) -> StreamingPolicy:
    try:
        return StreamingPolicy(value.lower())
    except ValueError:
        raise ConfigError(f"Unknown streaming policy {value}") from None
