"""microgen binding generator."""

from .config import ConfigError as ConfigError
from .config import GeneratorConfig as GeneratorConfig
from .config import StreamingPolicy as StreamingPolicy
from .descriptors import TypeResolver as TypeResolver
from .descriptors import UnresolvedTypeError as UnresolvedTypeError
from .driver import PLUGIN_NAME as PLUGIN_NAME
from .driver import GeneratedFile as GeneratedFile
from .driver import Generator as Generator
from .driver import generate as generate
from .parser import ValidationError as ValidationError
from .parser import load as load
from .parser import parse as parse
from .signatures import StreamingNotSupportedError as StreamingNotSupportedError
from .signatures import build_service as build_service
from .types import *
