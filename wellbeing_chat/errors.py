"""
Domain errors. Each carries the HTTP status it maps to and a message that is
safe to show to the caller (provider and driver details are only logged).
"""
from fastapi import status


class ChatServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(ChatServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthFailure(ChatServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class DuplicateEmail(AuthFailure):
    status_code = status.HTTP_409_CONFLICT
    default_message = "A user with this email already exists"


class UpstreamFailure(ChatServiceError):
    default_message = "AI service temporarily unavailable. Please try again later."


class StoreFailure(ChatServiceError):
    default_message = "Storage error. Please try again later."
