"""Disposable phone number rental service."""

__version__ = "0.1.0"
