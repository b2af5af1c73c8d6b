"""Parameter management console for the DLMM position checker."""

__version__ = "0.3.0"

__all__ = ["__version__"]
