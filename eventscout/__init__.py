"""Event Scout - natural-language search over local events and community listings."""

__version__ = "0.1.0"
