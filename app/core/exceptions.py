"""Domain error taxonomy

Every rejection the core can produce is a subclass of ``TravelTalesError``
carrying the HTTP status the edge should use. Route handlers never build
error responses by hand; the handlers registered in ``app.main`` shape them
per client type.
"""
from fastapi import status


class TravelTalesError(Exception):
    """Base class for domain rejections"""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be completed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(TravelTalesError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class InvalidToken(Unauthenticated):
    default_message = "Invalid token"


class InvalidCredentials(Unauthenticated):
    default_message = "Invalid email or password"


class NotOwner(TravelTalesError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class NotFound(TravelTalesError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class SelfFollow(TravelTalesError):
    default_message = "Cannot follow yourself"


class InvalidResourceType(TravelTalesError):
    default_message = "Invalid resource type"


class ValidationFailed(TravelTalesError):
    pass


class CountryServiceError(TravelTalesError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Country service unavailable"
