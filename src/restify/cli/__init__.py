"""Command line interface (``restify``)."""

from restify.cli.app import app

__all__ = ["app"]
