"""microgen - Message-bus RPC binding generator."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("microgen")
except PackageNotFoundError:
    __version__ = "(local)"
