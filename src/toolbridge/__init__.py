"""toolbridge — run externally-defined agent tools through a local CLI subprocess."""

__version__ = "0.1.0"
