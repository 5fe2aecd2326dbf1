"""Shared building blocks for the Awaymail service: logging, request context, REST, MongoDB and encryption helpers."""

__version__ = "0.1.0"