"""Patchnotes -- streaming release-note generation for merged pull requests."""

__version__ = "0.1.0"
