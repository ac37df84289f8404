"""Flask page and JSON API on top of the type-ahead Engine."""
from .web import app, main

__all__ = ["app", "main"]
