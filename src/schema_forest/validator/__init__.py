"""Structural validation of forest nodes."""

from schema_forest.validator.constraints import ConstraintValidator

__all__ = ["ConstraintValidator"]
