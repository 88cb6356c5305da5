"""Permitsy data-access layer for the visa site backend."""

__version__ = "1.0.0"
