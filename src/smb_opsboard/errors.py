# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Exception hierarchy for SMB OpsBoard.

Store failures and validation failures are raised by the lower layers
(db, notifications, controllers helpers) and caught by the module
controllers, which turn them into one-shot user messages.
"""

from typing import Any, Optional


class OpsBoardError(Exception):
    """Base exception for all SMB OpsBoard errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(OpsBoardError):
    """Raised when the configuration file is inconsistent."""


class RecordStoreError(OpsBoardError):
    """A Record Store operation (select, insert, update, delete) failed."""


class RecordNotFoundError(RecordStoreError):
    """The targeted row does not exist in the Record Store."""


class ValidationError(OpsBoardError):
    """Client-side validation rejected the submitted values."""

    def __init__(
        self,
        message: str,
        fields: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.fields = fields or []
