"""filterproto - Protobuf bindings for proxy filter configuration."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("filterproto")
except PackageNotFoundError:
    __version__ = "(local)"
