"""Arena - a text-protocol battle server."""

__version__ = "0.1.0"
