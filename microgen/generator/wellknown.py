"""Well-known schema files available without being on disk."""

from .types import ProtoFile, ProtoMessage

# google.protobuf.Any: a type URL string plus an opaque byte blob
ANY = ProtoFile(
    name="google/protobuf/any.proto",
    package="google.protobuf",
    go_package="github.com/plimble/protobuf/ptypes/any;any",
    dependencies=[],
    messages=[ProtoMessage(name="Any")],
    services=[],
)

WELL_KNOWN_FILES: dict[str, ProtoFile] = {f.name: f for f in [ANY]}


def is_well_known(name: str) -> bool:
    return name in WELL_KNOWN_FILES
