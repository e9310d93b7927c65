"""mpscope: dependency graph and dead-file analysis for mini-program source trees."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mpscope")
except PackageNotFoundError:
    __version__ = "dev"
