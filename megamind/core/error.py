"""\
Error and warnings
==================

Author: Akshay Mestry <xa@mes3.dev>
Created on: Saturday, August 02 2025
Last updated on: Monday, October 19 2026

This module provides the error classes that are used throughout this
package. Rejected calls (duplicates, exhausted quota, missing arguments)
are never raised to the consumer, so this hierarchy is intentionally
small.
"""

from __future__ import annotations


__all__: tuple[str, ...] = (
    "BindingError",
    "ConfigValidationError",
    "MegamindError",
    "ValidationError",
)

Error = Exception


class BaseError(Error):
    """Base error class for all exceptions."""


MegamindError = BaseError


class BindingError(BaseError):
    """Errors related to attaching or operating a binding."""


class ValidationError(BaseError):
    """Errors related to validation check failure."""


class ConfigValidationError(ValidationError):
    """Errors related to configuration validation failure."""
