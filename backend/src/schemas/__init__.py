"""Shared Pydantic building blocks for API schemas"""

from .base import CamelModel

__all__ = ["CamelModel"]
