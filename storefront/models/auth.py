"""
Authentication Models

States and value objects shared by the admin session and its collaborators.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from storefront.core.constants import OWNERSHIP_POLICY_FAIL_CLOSED, OWNERSHIP_POLICY_FAIL_OPEN


class AuthState(str, Enum):
    """
    Admin session states.

    loading -> error | login | verifying
    verifying -> authenticated | not-owner
    authenticated | not-owner -> login (sign-out)
    """
    LOADING = "loading"
    ERROR = "error"
    LOGIN = "login"
    VERIFYING = "verifying"
    NOT_OWNER = "not-owner"
    AUTHENTICATED = "authenticated"


class OwnershipFailurePolicy(str, Enum):
    """What the session does when the ownership check itself fails."""
    FAIL_CLOSED = OWNERSHIP_POLICY_FAIL_CLOSED
    FAIL_OPEN = OWNERSHIP_POLICY_FAIL_OPEN


@dataclass
class AuthUser:
    """
    A user signed in with the credential provider.

    Attributes:
        uid: Provider user id
        email: Account email
        id_token: Provider ID token (never logged)
        refresh_token: Provider refresh token (never logged)
        expires_in: ID token lifetime in seconds
    """
    uid: str
    email: str = ""
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: int = 0

    def __repr__(self) -> str:
        return f"AuthUser(uid={self.uid!r}, email={self.email!r})"


@dataclass
class LoginOutcome:
    """
    Result of a sign-in submission as shown to the admin.

    Attributes:
        state: Session state after the attempt
        success: The credential provider accepted the credentials
        message: User-facing message ("" on success)
        locked: Whether further attempts are currently blocked
        lockout_minutes: Minutes left in the lockout (0 if not locked)
        attempts_left: Failed attempts still allowed
    """
    state: AuthState
    success: bool = False
    message: str = ""
    locked: bool = False
    lockout_minutes: int = 0
    attempts_left: int = 0


@dataclass
class SessionSnapshot:
    """Read-only view of the admin session for the presentation layer."""
    state: AuthState
    user: Optional[AuthUser] = None
    is_owner: bool = False
    message: str = ""
    locked: bool = False
    lockout_minutes: int = 0
    store_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "user_id": self.user.uid if self.user else None,
            "email": self.user.email if self.user else None,
            "is_owner": self.is_owner,
            "message": self.message,
            "locked": self.locked,
            "lockout_minutes": self.lockout_minutes,
            "store_id": self.store_id,
        }
