"""
Custom application exceptions
"""

from typing import Optional, Dict, Any


class VenueApiException(Exception):
    """Base exception for the venue directory API"""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(VenueApiException):
    """Missing or invalid credentials"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="AUTH_ERROR",
            status_code=401,
            details=details
        )


class UnauthorizedError(VenueApiException):
    """Authenticated, but not allowed to perform the action"""

    def __init__(self, message: str = "Not authorized", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="AUTH_FORBIDDEN",
            status_code=403,
            details=details
        )


class NotFoundError(VenueApiException):
    """Resource not found errors"""

    def __init__(self, code: str, identifier: Any = None):
        message = code.replace("_", " ").capitalize()
        if identifier:
            message = f"{message}: {identifier}"
        super().__init__(
            message=message,
            code=code,
            status_code=404
        )


class InvalidRequestError(VenueApiException):
    """Request is well-formed but cannot be processed"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code="INVALID_REQUEST",
            status_code=400,
            details=details
        )


class ConfigNotFoundError(VenueApiException):
    """
    No city configuration for a (country, city) pair.

    Every stored venue with a location must have a configuration, so this is a
    data integrity problem and surfaces as a server error.
    """

    def __init__(self, country: Optional[str], city: Optional[str]):
        super().__init__(
            message=f"No city configuration for {country}/{city}",
            code="CITY_CONFIG_NOT_FOUND",
            status_code=500,
            details={"country": country, "city": city}
        )


class InvalidCityConfigError(VenueApiException):
    """City configuration file failed validation at load time"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            message=message,
            code="INVALID_CITY_CONFIG",
            status_code=500,
            details=details
        )
