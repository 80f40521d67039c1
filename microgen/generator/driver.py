"""Generation driver: turns schema files into binding files."""

import logging
import posixpath
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from . import golang
from .config import GeneratorConfig
from .descriptors import GoImport, ServiceAdapter, TypeResolver, go_package_name
from .printer import LineBuffer, Printer
from .signatures import build_service
from .types import GenerationError, ProtoFile

logger = logging.getLogger(__name__)

# Name the host selects this generator by
PLUGIN_NAME = "micro"


@dataclass(frozen=True)
class GeneratedFile:
    """A generated output file."""

    name: str
    content: str


def output_name(file: ProtoFile) -> str:
    """Return the name of the binding file generated for a schema file."""
    return f"{file.name.removesuffix('.proto')}.{PLUGIN_NAME}.go"


class Generator:
    """Emit bindings for the services of schema files.

    files are all schema files visible to the run, including dependencies;
    they are only read.
    """

    def __init__(self, files: Iterable[ProtoFile], config: GeneratorConfig | None = None):
        self.files = list(files)
        self.config = config or GeneratorConfig()

    def generate_file(self, file: ProtoFile, p: Printer) -> None:
        """Emit the bindings of one schema file through p.

        Files without services produce no output.
        """
        if not file.services:
            logger.debug("%s: no services, skipping", file.name)
            return

        resolver = TypeResolver(self.files, file, self.config.import_prefix)
        body = LineBuffer()
        for service in file.services:
            logger.debug("%s: generating service %s", file.name, service.name)
            context = self.config.naming_context(file, service)
            adapter = ServiceAdapter(service, resolver, self.config.reserved)
            binding = build_service(adapter, context, self.config.streaming)

            body()
            golang.emit_client(binding, context, body)
            body()
            golang.emit_server(binding, context, body)

        # Imports are only known once every type has been resolved
        imports = [
            GoImport(
                self.config.runtime_alias,
                posixpath.join(self.config.import_prefix, self.config.runtime_import),
            ),
            *resolver.imports,
        ]
        golang.emit_header(file.name, go_package_name(file), imports, PLUGIN_NAME, p)
        for line in body.lines:
            p(line)

    def generate(self, file: ProtoFile) -> GeneratedFile | None:
        """Generate the binding file for a schema file, if it has services."""
        buf = LineBuffer()
        self.generate_file(file, buf)
        content = buf.getvalue()
        if not content:
            return None
        logger.info("Generated %s", output_name(file))
        return GeneratedFile(name=output_name(file), content=content)


def generate(
    files: Sequence[ProtoFile],
    file_to_generate: Iterable[str],
    config: GeneratorConfig | None = None,
) -> list[GeneratedFile]:
    """Generate binding files for the named schema files.

    Any GenerationError aborts the whole run.
    """
    by_name = {f.name: f for f in files}
    generator = Generator(files, config)

    generated: list[GeneratedFile] = []
    for name in file_to_generate:
        if name not in by_name:
            raise GenerationError(f"{name} was requested but not provided")
        result = generator.generate(by_name[name])
        if result is not None:
            generated.append(result)
    return generated
