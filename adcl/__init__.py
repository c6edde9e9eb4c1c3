"""adcl - Parameter accessor generator for ADC-style protocol messages."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("adcl")
except PackageNotFoundError:
    __version__ = "(local)"
