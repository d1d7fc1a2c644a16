# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Suppression of accepted false positives across runs."""

from __future__ import annotations

from .models import Override, OverrideCriteria, OverrideStatistics, OverrideStatus
from .store import OverrideStore

__all__ = ["Override", "OverrideCriteria", "OverrideStatistics", "OverrideStatus", "OverrideStore"]
