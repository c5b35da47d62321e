"""Rutas de la API."""

from . import person, session

__all__ = ["person", "session"]
