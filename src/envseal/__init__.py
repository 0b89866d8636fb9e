"""envseal: authenticated encryption of values in .env configuration files."""

__version__ = "0.1.0"
