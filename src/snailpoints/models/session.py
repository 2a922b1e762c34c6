"""Session classification models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

# Literal error text the backend returns for accounts awaiting email verification.
VERIFICATION_REQUIRED_MESSAGE = "Please activate your account. Check your email."


class SessionMode(StrEnum):
    """Derived session classification for one application load."""
    LOADING = "loading"
    UNAVAILABLE = "unavailable"
    PENDING_VERIFICATION = "pending_verification"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class SessionState:
    """Session mode plus the admin flag reported alongside it."""
    mode: SessionMode = SessionMode.LOADING
    admin: bool = False

    @property
    def is_resolved(self) -> bool:
        return self.mode is not SessionMode.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.mode is SessionMode.AUTHENTICATED

    @property
    def is_admin(self) -> bool:
        """Admin flag, only honoured for authenticated sessions."""
        return self.is_authenticated and self.admin
