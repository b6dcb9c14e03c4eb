"""schemabind - Go binding generator for RPC interface schemas."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("schemabind")
except PackageNotFoundError:
    __version__ = "(local)"
