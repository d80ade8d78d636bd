"""Canonical name resolution."""

from .registry import NameRegistry, max_edit_distance, name_distance

__all__ = ["NameRegistry", "max_edit_distance", "name_distance"]
