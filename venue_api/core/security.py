"""
Security utilities for authentication and authorization
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from jose import JWTError, jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
import logging
import time

from venue_api.config import settings
from venue_api.core.constants import ClientIds, UserRoles
from venue_api.core.exceptions import AuthenticationError, UnauthorizedError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

APP_TOKEN_HEADER = "X-App-Token"


class CurrentUser(BaseModel):
    """Caller identity taken from the access token"""
    id: str
    email: Optional[str] = None
    roles: List[str] = []

    def check_role(self, *roles: str) -> bool:
        return any(role in self.roles for role in roles)


class SecurityManager:
    """
    JWT creation and verification
    """

    @staticmethod
    def create_access_token(
        data: Dict[str, Any],
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create a JWT access token
        """
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(
                minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
            )

        to_encode.update({
            "exp": expire,
            "type": "access",
            "iat": int(time.time()),
        })

        return jwt.encode(
            to_encode,
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        Decode and verify a JWT token
        """
        try:
            return jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
        except JWTError as e:
            logger.warning(f"JWT decode error: {e}")
            raise AuthenticationError("Could not validate credentials")

    @staticmethod
    def verify_token_type(payload: Dict[str, Any], expected_type: str):
        """
        Verify token type
        """
        token_type = payload.get("type")
        if token_type != expected_type:
            raise AuthenticationError(f"Invalid token type. Expected {expected_type}")

    def get_user_from_token(self, token: str) -> CurrentUser:
        payload = self.decode_token(token)
        self.verify_token_type(payload, "access")

        user_id = payload.get("sub")
        if user_id is None:
            raise AuthenticationError("Could not validate credentials")

        return CurrentUser(
            id=str(user_id),
            email=payload.get("email"),
            roles=payload.get("roles") or [],
        )


# Create global security manager
security_manager = SecurityManager()


def create_access_token(
    subject: str,
    roles: Optional[List[str]] = None,
    expires_delta: Optional[timedelta] = None,
    **claims: Any
) -> str:
    """
    Create access token helper function
    """
    data = {"sub": subject, "roles": roles or [UserRoles.USER], **claims}
    return security_manager.create_access_token(data, expires_delta)


def jwt_auth(required: bool = True):
    """
    Authenticate the request with its bearer token and store the user on
    ``request.state.user``. When not required, a missing or bad token
    leaves the request anonymous.
    """
    async def dependency(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    ) -> Optional[CurrentUser]:
        request.state.user = None
        try:
            if credentials is None:
                raise AuthenticationError("Not authenticated")
            request.state.user = security_manager.get_user_from_token(credentials.credentials)
        except AuthenticationError:
            if required:
                raise
        return request.state.user

    return dependency


def check_role(*roles: str):
    """
    Require the authenticated user to hold one of ``roles``.
    Must run after ``jwt_auth``.
    """
    async def dependency(request: Request) -> CurrentUser:
        user = getattr(request.state, "user", None)
        if not user or not user.check_role(*roles):
            raise UnauthorizedError()
        return user

    return dependency


def admin_auth() -> list:
    """Route dependencies for admin-only endpoints"""
    return [Depends(jwt_auth()), Depends(check_role(UserRoles.ADMIN))]


async def set_client_id(request: Request) -> Optional[str]:
    """
    Tag requests from the first-party app
    """
    request.state.client_id = None
    token = request.headers.get(APP_TOKEN_HEADER)
    if settings.APP_TOKEN and token == settings.APP_TOKEN:
        request.state.client_id = ClientIds.CLIENT_APP
    return request.state.client_id


async def authenticate_app_client(request: Request) -> None:
    """
    Only admins and the first-party app may pass
    """
    user = getattr(request.state, "user", None)
    if user and user.check_role(UserRoles.ADMIN):
        return
    if getattr(request.state, "client_id", None) != ClientIds.CLIENT_APP:
        raise UnauthorizedError()
