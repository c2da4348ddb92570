"""Domain models for coop-lending."""

from coop_lending.models.base import ChangeEvent

__all__ = ["ChangeEvent"]
