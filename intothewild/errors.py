# -*- coding: utf-8 -*-
"""
Error taxonomy of the registration workflow.

Services raise ``WorkflowError`` with one of the ``ErrorCode`` values. The
application-level handler in ``main.py`` logs the code and answers with the
human readable message only; codes never reach end users.
"""

import enum
from typing import Iterable, Optional

from fastapi import status


class ErrorCode(str, enum.Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INDEMNITY_REQUIRED = "INDEMNITY_REQUIRED"
    MISSING_CONTACT_DETAILS = "MISSING_CONTACT_DETAILS"
    TREK_NOT_LOADED = "TREK_NOT_LOADED"
    MISSING_APPROVED_ID = "MISSING_APPROVED_ID"
    REQUIREMENT_CHECK_FAILED = "REQUIREMENT_CHECK_FAILED"
    TREK_FULL = "TREK_FULL"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    UPDATE_FAILED = "UPDATE_FAILED"
    UNKNOWN_STORE_ERROR = "UNKNOWN_STORE_ERROR"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_STATE = "INVALID_STATE"
    TENT_UNAVAILABLE = "TENT_UNAVAILABLE"
    INVALID_FILE = "INVALID_FILE"


MESSAGES = {
    ErrorCode.AUTH_REQUIRED: "Please log in to register for this trek.",
    ErrorCode.INDEMNITY_REQUIRED: "You must accept the indemnity agreement to register.",
    ErrorCode.MISSING_CONTACT_DETAILS: "Please provide your name and phone number.",
    ErrorCode.TREK_NOT_LOADED: "Trek not found.",
    ErrorCode.MISSING_APPROVED_ID: "This trek requires approved ID proofs before registration.",
    ErrorCode.REQUIREMENT_CHECK_FAILED: "Could not verify the ID requirements for this trek. Please try again.",
    ErrorCode.TREK_FULL: "This trek is already full.",
    ErrorCode.ALREADY_REGISTERED: "You are already registered for this trek.",
    ErrorCode.UPLOAD_FAILED: "Failed to upload the file. Please try again.",
    ErrorCode.UPDATE_FAILED: "Could not save your changes. Please try again.",
    ErrorCode.UNKNOWN_STORE_ERROR: "Something went wrong. Please try again.",
    ErrorCode.REGISTRATION_NOT_FOUND: "Registration not found.",
    ErrorCode.FORBIDDEN: "You are not allowed to change this registration.",
    ErrorCode.INVALID_STATE: "This action is not allowed in the current state.",
    ErrorCode.TENT_UNAVAILABLE: "Not enough tents available for this request.",
    ErrorCode.INVALID_FILE: "Only non-empty images or PDF files are accepted.",
}

HTTP_STATUS = {
    ErrorCode.AUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INDEMNITY_REQUIRED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_CONTACT_DETAILS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.TREK_NOT_LOADED: status.HTTP_404_NOT_FOUND,
    ErrorCode.MISSING_APPROVED_ID: status.HTTP_403_FORBIDDEN,
    ErrorCode.REQUIREMENT_CHECK_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.TREK_FULL: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.UPLOAD_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.UPDATE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.UNKNOWN_STORE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.REGISTRATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorCode.TENT_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_FILE: status.HTTP_400_BAD_REQUEST,
}


class WorkflowError(Exception):
    """A workflow check or store operation failed closed."""

    def __init__(self, code: ErrorCode, detail: Optional[str] = None, missing: Iterable[str] = ()):
        self.code = code
        self.missing = list(missing)
        self.detail = detail or MESSAGES[code]
        super().__init__(f"{code.value}: {self.detail}")

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.code]

    @property
    def message(self) -> str:
        if self.missing:
            return f"{self.detail} Missing: {', '.join(self.missing)}."
        return self.detail
