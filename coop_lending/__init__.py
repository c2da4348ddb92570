"""Record keeping for a pension-backed lending cooperative."""

__version__ = "0.1.0"
