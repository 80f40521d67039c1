"""Method signatures and per-service binding plans.

Everything here is plain data; the renderers turn it into source text
without re-deriving any of the streaming decisions.
"""

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin

from . import naming
from .config import StreamingPolicy
from .descriptors import MethodAdapter, ServiceAdapter
from .types import Flavor, GenerationError, NamingContext

REQUEST_PARAM = "req"


class StreamingNotSupportedError(GenerationError):
    """Raised for streaming methods when the streaming policy is "error"."""


@dataclass(frozen=True)
class TypeRef(DataClassJsonMixin):
    """A type as it appears in a signature.

    stream=True marks a stream placeholder rather than a message value.
    """

    name: str
    stream: bool = False


@dataclass(frozen=True)
class Param(DataClassJsonMixin):
    name: str
    type: TypeRef


@dataclass(frozen=True)
class Signature(DataClassJsonMixin):
    """A client method signature. Every client method also returns an error."""

    name: str
    params: tuple[Param, ...]
    result: TypeRef | None


@dataclass(frozen=True)
class HandlerType(DataClassJsonMixin):
    """A server handler function type. Handlers return an error."""

    name: str
    params: tuple[TypeRef, ...]


@dataclass(frozen=True)
class MethodBinding(DataClassJsonMixin):
    """Everything emitted for one method."""

    name: str
    flavor: Flavor
    comment: str | None
    subject: str
    subject_suffix: str
    queue_group: str
    request: Signature
    publish: Signature
    handler: HandlerType
    input_type: str | None  # Only resolved for unary methods
    output_type: str | None

    @property
    def unary(self) -> bool:
        return self.flavor == Flavor.UNARY

    @property
    def comment_lines(self) -> list[str]:
        return self.comment.split("\n") if self.comment else []


@dataclass(frozen=True)
class Wiring(DataClassJsonMixin):
    """A server subscription wiring type."""

    type_name: str
    constructor: str
    receiver: str
    queue: bool


@dataclass(frozen=True)
class ServiceBinding(DataClassJsonMixin):
    """Everything emitted for one service, methods in declaration order."""

    name: str
    comment: str | None
    subject_prefix: str
    default_prefix_name: str
    client_interface: str
    client_struct: str
    client_constructor: str
    wirings: tuple[Wiring, ...]
    methods: tuple[MethodBinding, ...]

    @property
    def comment_lines(self) -> list[str]:
        return self.comment.split("\n") if self.comment else []


def _request_params(method: MethodAdapter) -> tuple[Param, ...]:
    if method.client_streaming:
        return ()
    return (Param(REQUEST_PARAM, TypeRef(method.input_type)),)


def client_request_signature(service: ServiceAdapter, method: MethodAdapter) -> Signature:
    """Build the signature of a method's synchronous request call."""
    if method.client_streaming or method.server_streaming:
        result = TypeRef(naming.stream_type_name(service.name, method.wire_name), stream=True)
    else:
        result = TypeRef(method.output_type)
    return Signature(naming.request_method_name(method.name), _request_params(method), result)


def client_publish_signature(service: ServiceAdapter, method: MethodAdapter) -> Signature:
    """Build the signature of a method's one-way publish call."""
    return Signature(naming.publish_method_name(method.name), _request_params(method), None)


def handler_type(method: MethodAdapter, context: NamingContext) -> HandlerType:
    """Build the function type a server handler for a method must have."""
    params = [TypeRef(f"{context.package_alias}.Context")]
    if not method.client_streaming:
        params.append(TypeRef(method.input_type))
    if method.flavor == Flavor.UNARY:
        params.append(TypeRef(method.output_type))
    return HandlerType(naming.handler_type_name(method.name), tuple(params))


def build_method(
    service: ServiceAdapter, method: MethodAdapter, context: NamingContext
) -> MethodBinding:
    subj = naming.subject(context.subject_prefix, method.wire_name)
    unary = method.flavor == Flavor.UNARY
    return MethodBinding(
        name=method.name,
        flavor=method.flavor,
        comment=method.comment,
        subject=subj,
        subject_suffix=naming.subject_suffix(method.wire_name),
        queue_group=naming.queue_group(subj),
        request=client_request_signature(service, method),
        publish=client_publish_signature(service, method),
        handler=handler_type(method, context),
        input_type=method.input_type if unary else None,
        output_type=method.output_type if unary else None,
    )


def build_service(
    service: ServiceAdapter,
    context: NamingContext,
    streaming: StreamingPolicy = StreamingPolicy.SHELL,
) -> ServiceBinding:
    """Build the binding plan for a service."""
    if streaming == StreamingPolicy.ERROR:
        for method in service.methods:
            if method.flavor != Flavor.UNARY:
                raise StreamingNotSupportedError(
                    f"{service.name}.{method.name}: {method.flavor} methods are not supported"
                )

    queue_type = naming.queue_subscribe_type_name(service.name)
    subscribe_type = naming.subscribe_type_name(service.name)

    return ServiceBinding(
        name=service.name,
        comment=service.comment,
        subject_prefix=context.subject_prefix,
        default_prefix_name=naming.default_prefix_name(service.name),
        client_interface=naming.client_interface_name(service.name),
        client_struct=naming.client_struct_name(service.name),
        client_constructor=naming.client_constructor_name(service.name),
        wirings=(
            Wiring(queue_type, naming.constructor_name(queue_type), "dq", queue=True),
            Wiring(subscribe_type, naming.constructor_name(subscribe_type), "ds", queue=False),
        ),
        methods=tuple(build_method(service, m, context) for m in service.methods),
    )
