from __future__ import annotations

import logging
from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    AUTH_FAILED = "AUTH_FAILED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    TOKEN_MISSING = "TOKEN_MISSING"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class LogLevel(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    DEBUG = "debug"

    @property
    def stdlib_level(self) -> int:
        return {
            LogLevel.INFO: logging.INFO,
            LogLevel.WARN: logging.WARNING,
            LogLevel.ERROR: logging.ERROR,
            LogLevel.DEBUG: logging.DEBUG,
        }[self]
