"""Configuration package for Form Pilot."""

from .settings import Settings

__all__ = ['Settings']
