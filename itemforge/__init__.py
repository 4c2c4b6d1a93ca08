"""itemforge - schema-driven synthetic item generation with LLMs."""

__version__ = "0.1.0"
