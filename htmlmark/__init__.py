"""Convert HTML to Markdown with a pluggable, priority-ordered rendering pipeline."""

__version__ = "2.0.0"

__all__ = ["__version__"]