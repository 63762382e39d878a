"""Terminal front-end for Blitz."""

from .main import app, main

__all__ = ["app", "main"]
