"""minfo - media source resolution and bounded inspection tooling."""

__version__ = "0.1.0"
