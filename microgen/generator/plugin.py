"""protoc plugin entry point (protoc-gen-micro)."""

import logging
import sys

from google.protobuf.compiler import plugin_pb2

from .config import ConfigError, GeneratorConfig
from .descriptors import file_from_descriptor
from .driver import generate
from .types import GenerationError

logger = logging.getLogger(__name__)


def generate_code(request: plugin_pb2.CodeGeneratorRequest) -> plugin_pb2.CodeGeneratorResponse:
    """Run the generator over a protoc request.

    Failures abort the whole run: the response then carries only the error.
    """
    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    try:
        config = GeneratorConfig.from_parameter(request.parameter)
        files = [file_from_descriptor(fd) for fd in request.proto_file]
        generated = generate(files, request.file_to_generate, config)
    except (ConfigError, GenerationError) as e:
        logger.error("%s", e)
        response.error = str(e)
        return response

    for gen in generated:
        response_file = response.file.add()
        response_file.name = gen.name
        response_file.content = gen.content

    return response


def main() -> None:
    """Execute the protoc plugin workflow."""
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)

    request_payload = sys.stdin.buffer.read()

    request = plugin_pb2.CodeGeneratorRequest()
    if request_payload:
        request.ParseFromString(request_payload)

    response = generate_code(request)
    sys.stdout.buffer.write(response.SerializeToString())


if __name__ == "__main__":
    main()
