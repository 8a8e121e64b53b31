"""Optional local HTTP surface for the conversion engine."""

from .app import create_app

__all__ = ["create_app"]
