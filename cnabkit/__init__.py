"""CNAB bundle archives, schema versions, value sources and host secret resolution."""

__version__ = "0.1.0"
__all__ = ["imagestore", "packager", "secrets", "valuesource", "version"]