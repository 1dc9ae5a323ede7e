"""Turn natural-language swap requests into ordered, unsigned transaction plans."""

__version__ = "0.1.0"
