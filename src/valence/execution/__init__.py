# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Validator execution engine."""

from __future__ import annotations

from .engine import ExecutionEngine, run_validators
from .normalize import OutputNormalizationError, normalize_output

__all__ = ["ExecutionEngine", "OutputNormalizationError", "normalize_output", "run_validators"]
