"""Guarded semantic-version releases across a development and a release branch."""

__version__ = "1.0.0"
