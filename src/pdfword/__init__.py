"""PDF to Word conversion with AI extraction and non-AI fallback."""

__version__ = "0.1.0"
