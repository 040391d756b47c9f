"""Exceptions that map straight onto an HTTP status in the JSON envelope."""

from typing import Optional


class NextAIError(Exception):
    """Base exception for Next-AI"""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, **extra):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra


class ValidationError(NextAIError):
    status_code = 400


class AuthError(NextAIError):
    """Missing, invalid or expired token"""
    status_code = 401


class ForbiddenError(NextAIError):
    status_code = 403


class LLMError(NextAIError):
    """Error from the generative AI API"""

    QUOTA = "quota"
    CONFIG = "config"
    OTHER = "other"

    def __init__(self, message: str, kind: str = OTHER):
        self.kind = kind
        super().__init__(message, status_code=429 if kind == self.QUOTA else 500)
