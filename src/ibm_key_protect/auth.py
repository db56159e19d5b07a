"""Request authenticators.

Token acquisition is out of scope: callers holding an IAM access token pass it
to ``BearerTokenAuthenticator`` or supply their own ``Authenticator`` subclass.
"""

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from .config import DEFAULT_SERVICE_NAME, get_settings


logger = logging.getLogger(__name__)

AUTHTYPE_NOAUTH = "noauth"
AUTHTYPE_BEARERTOKEN = "bearerToken"
AUTHTYPE_BASIC = "basic"


class Authenticator(ABC):
    @abstractmethod
    def authenticate(self, headers: Dict[str, str]) -> None:
        """Add credentials to ``headers`` in place."""

    def validate(self) -> None:
        return None

    @abstractmethod
    def authentication_type(self) -> str:
        ...


class NoAuthAuthenticator(Authenticator):
    def authenticate(self, headers: Dict[str, str]) -> None:
        return None

    def authentication_type(self) -> str:
        return AUTHTYPE_NOAUTH


class BearerTokenAuthenticator(Authenticator):
    def __init__(self, bearer_token: str) -> None:
        self.bearer_token = bearer_token
        self.validate()

    def validate(self) -> None:
        if not self.bearer_token:
            raise ValueError("The bearer token shouldn't be None.")

    def set_bearer_token(self, bearer_token: str) -> None:
        self.bearer_token = bearer_token
        self.validate()

    def authenticate(self, headers: Dict[str, str]) -> None:
        headers["Authorization"] = f"Bearer {self.bearer_token}"

    def authentication_type(self) -> str:
        return AUTHTYPE_BEARERTOKEN


class BasicAuthenticator(Authenticator):
    def __init__(self, username: str, password: str) -> None:
        self.username = username
        self.password = password
        self.validate()

    def validate(self) -> None:
        if not self.username or not self.password:
            raise ValueError("The username and password shouldn't be None.")
        for value in (self.username, self.password):
            if value.startswith(("{", '"')) or value.endswith(("}", '"')):
                raise ValueError(
                    "The username and password shouldn't start or end with curly brackets or quotes."
                )

    def authenticate(self, headers: Dict[str, str]) -> None:
        credentials = f"{self.username}:{self.password}".encode("utf-8")
        headers["Authorization"] = "Basic " + base64.b64encode(credentials).decode("ascii")

    def authentication_type(self) -> str:
        return AUTHTYPE_BASIC


def get_authenticator_from_environment(service_name: str = DEFAULT_SERVICE_NAME) -> Authenticator:
    settings = get_settings(service_name)
    auth_type = (settings.auth_type or "").lower()

    if auth_type == AUTHTYPE_NOAUTH:
        return NoAuthAuthenticator()
    if auth_type == AUTHTYPE_BEARERTOKEN.lower():
        return BearerTokenAuthenticator(_require(settings.bearer_token, "bearer_token", service_name))
    if auth_type == AUTHTYPE_BASIC:
        return BasicAuthenticator(
            _require(settings.username, "username", service_name),
            _require(settings.password, "password", service_name),
        )

    raise ValueError(f"Unsupported authentication type for {service_name}: {settings.auth_type}")


def _require(value: Optional[str], name: str, service_name: str) -> str:
    if not value:
        logger.warning("Missing %s in external configuration for %s", name, service_name)
        raise ValueError(f"Missing {name} for service {service_name}")
    return value
