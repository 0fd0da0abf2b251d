# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the validation pipeline."""

from __future__ import annotations


class PrValidateError(Exception):
    """Base class for errors raised by pr-validate."""


class PreconditionError(PrValidateError):
    """Raised when the run cannot start or continue (missing repo, tool, ref or alias)."""


class ConfigError(PrValidateError):
    """Raised when configuration input is invalid."""


__all__ = ["ConfigError", "PrValidateError", "PreconditionError"]
