# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Catalog of validator and profile definitions stored as JSON documents."""

from __future__ import annotations

from .io import DocumentError, load_document
from .loader import ValidatorLoader
from .schema import SchemaRepository

__all__ = ["DocumentError", "SchemaRepository", "ValidatorLoader", "load_document"]
