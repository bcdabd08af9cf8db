"""HTTP boundary: request validation and JSON routes over the accounting engine."""

from .app import create_app  # re-export
