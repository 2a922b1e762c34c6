"""Credential operations: login, sign-up, logout and password forms."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from snailpoints.api.client import ApiResponse, PointsApiClient
from snailpoints.utils.logging import get_logger

logger = get_logger(__name__)

PASSWORD_MISMATCH = "Passwords do not match"


class PasswordForm(StrEnum):
    """Password form variants and the endpoint each one posts to."""
    RESET = "/resetpassword"
    CHANGE = "/changepassword"
    SET = "/setpassword"
    DEMO_USER = "/makedemo"

    @property
    def heading(self) -> str:
        return _FORM_LAYOUT[self].heading

    @property
    def has_username(self) -> bool:
        return _FORM_LAYOUT[self].has_username

    @property
    def has_current_password(self) -> bool:
        return _FORM_LAYOUT[self].has_current_password

    @property
    def has_confirm_password(self) -> bool:
        return _FORM_LAYOUT[self].has_confirm_password

    @property
    def admin_only(self) -> bool:
        return self in (PasswordForm.SET, PasswordForm.DEMO_USER)


@dataclass(frozen=True)
class _FormLayout:
    heading: str
    has_username: bool
    has_current_password: bool
    has_confirm_password: bool


_FORM_LAYOUT: dict[PasswordForm, _FormLayout] = {
    PasswordForm.RESET: _FormLayout("Reset Password", False, False, True),
    PasswordForm.CHANGE: _FormLayout("Change Password", False, True, True),
    PasswordForm.SET: _FormLayout("Set User Password", True, False, False),
    PasswordForm.DEMO_USER: _FormLayout("Create Demo User", True, False, False),
}


@dataclass(frozen=True)
class AccountResult:
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class FormCheck:
    """Whether a form may be submitted, plus an inline message to show."""
    submittable: bool
    error: str | None = None


def check_password_pair(password: str, confirm: str | None) -> FormCheck:
    if len(password) == 0:
        return FormCheck(False)
    if confirm is None:
        return FormCheck(True)
    if len(confirm) == 0:
        return FormCheck(False)
    if password != confirm:
        return FormCheck(False, PASSWORD_MISMATCH)
    return FormCheck(True)


def check_login_form(
    username: str,
    password: str,
    confirm: str | None = None,
) -> FormCheck:
    """Login needs a username and password; sign-up also needs a matching confirmation."""
    if len(username) == 0:
        return FormCheck(False)
    return check_password_pair(password, confirm)


def check_password_form(
    form: PasswordForm,
    new: str,
    confirm: str = "",
    current: str = "",
    user: str = "",
) -> FormCheck:
    """Completeness check for a password form. Not a password policy."""
    if form.has_username and len(user) == 0:
        return FormCheck(False)
    if form.has_current_password and len(current) == 0:
        return FormCheck(False)
    return check_password_pair(new, confirm if form.has_confirm_password else None)


def _result(resp: ApiResponse, fallback: str) -> AccountResult:
    if resp.transport_error is not None or resp.malformed:
        return AccountResult(False, fallback)
    if resp.error:
        return AccountResult(False, resp.error)
    if "success" in resp.data:
        return AccountResult(True)
    if not resp.ok:
        return AccountResult(False, fallback)
    return AccountResult(False)


class AccountService:
    """Thin wrapper over the account endpoints with user-facing error text."""

    def __init__(self, client: PointsApiClient) -> None:
        self._client = client

    async def login(self, username: str, password: str) -> AccountResult:
        result = _result(await self._client.login(username, password), "Login failed")
        logger.info("account_login", username=username, success=result.success)
        return result

    async def create_account(self, email: str, username: str, password: str) -> AccountResult:
        resp = await self._client.create_account(email, username, password)
        result = _result(resp, "Sign up failed")
        logger.info("account_created", username=username, success=result.success)
        return result

    async def logout(self) -> AccountResult:
        """Log out; any response without an ``error`` counts as success."""
        resp = await self._client.logout()
        if resp.transport_error is not None or resp.malformed:
            logger.warning("account_logout_failed", reason=resp.describe())
            return AccountResult(False, "Logout failed")
        if resp.error:
            return AccountResult(False, resp.error)
        return AccountResult(True)

    async def submit_password(
        self,
        form: PasswordForm,
        new: str,
        current: str | None = None,
        user: str | None = None,
        code: str | None = None,
    ) -> AccountResult:
        payload: dict[str, Any] = {"new": new}
        if form.has_username and user is not None:
            payload["user"] = user
        if form.has_current_password and current is not None:
            payload["current"] = current
        if code is not None:
            payload["code"] = code
        resp = await self._client.submit_password(form.value, payload)
        result = _result(resp, "Submit failed")
        logger.info("account_password_submitted", form=form.name, success=result.success)
        return result

    async def forgot_password(self, email: str) -> AccountResult:
        return _result(await self._client.forgot_password(email), "Request failed")

    async def verify_email(self, code: str) -> AccountResult:
        return _result(await self._client.verify_email(code), "Verification failed")

    async def resend_code(self) -> AccountResult:
        return _result(await self._client.resend_code(), "Request failed")
