"""Account authentication endpoints."""

from typing import Any, Dict, Mapping

from ..exceptions import ValidationError
from ..validation import is_valid_email, sanitize_metadata
from .base import BaseService


class AuthService(BaseService):
    """Register, sign in and manage the calling account."""

    resource_path = "/auth"

    def register(self, user_data: Mapping[str, Any]) -> Dict[str, Any]:
        """Register a new account.

        Raises:
            ValidationError: If email or password is missing
        """
        self._require_email(user_data.get("email"))
        self._require(user_data.get("password"), "password")
        return self.pipeline.post(self._path("register"), dict(user_data))

    def login(self, email: str, password: str) -> Dict[str, Any]:
        self._require_email(email)
        self._require(password, "password")
        return self.pipeline.post(self._path("login"), {"email": email, "password": password})

    def logout(self) -> None:
        self.pipeline.post(self._path("logout"))

    def refresh_token(self, refresh_token: str) -> Dict[str, Any]:
        self._require(refresh_token, "refresh_token")
        return self.pipeline.post(self._path("refresh"), {"refresh_token": refresh_token})

    def me(self) -> Dict[str, Any]:
        return self._unwrap(self.pipeline.get(self._path("me")))

    def update_profile(self, attributes: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(
            self.pipeline.patch(self._path("me"), sanitize_metadata(dict(attributes)))
        )

    def change_password(self, current_password: str, new_password: str) -> None:
        self._require(current_password, "current_password")
        self._require(new_password, "new_password")
        self.pipeline.patch(
            self._path("password"),
            {"current_password": current_password, "new_password": new_password},
        )

    def request_password_reset(self, email: str) -> None:
        self._require_email(email)
        self.pipeline.post(self._path("forgot-password"), {"email": email})

    def reset_password(self, token: str, new_password: str) -> None:
        self._require(token, "token")
        self._require(new_password, "new_password")
        self.pipeline.post(
            self._path("reset-password"), {"token": token, "password": new_password}
        )

    def _require_email(self, email: Any) -> None:
        self._require(email, "email")
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
