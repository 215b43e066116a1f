"""
Identity and Profile Models

A UserProfile is what the app knows about the signed-in person.
It is serialized with camelCase keys (firstName, lastName, ...) so the
same document shape is used in the remote profile store and in the
durable local store.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from finwise.models.finance import utc_now


class UserProfile(BaseModel):
    """Profile document keyed by the identity provider's uid."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    uid: str = Field(..., min_length=1)
    first_name: str = Field(default="User")
    last_name: str = Field(default="")
    email: Optional[str] = None
    currency: str = Field(
        default="INR",
        description="ISO currency code; unknown codes render with the default symbol"
    )
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None

    @classmethod
    def from_display_name(
        cls,
        uid: str,
        email: Optional[str],
        display_name: Optional[str],
        currency: str = "INR",
    ) -> "UserProfile":
        """
        Build the minimal profile used when no stored document is available.

        "Jane Doe" becomes first_name="Jane", last_name="Doe";
        an empty display name becomes "User".
        """
        parts = (display_name or "").split(" ")
        return cls(
            uid=uid,
            email=email,
            first_name=parts[0] or "User",
            last_name=parts[1] if len(parts) > 1 else "",
            currency=currency,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_document(self) -> dict:
        """Serialize for storage (camelCase keys, ISO timestamps)."""
        return self.model_dump(mode="json", by_alias=True)

    def touched(self, **changes) -> "UserProfile":
        """Copy with changes applied and last_updated set to now."""
        return self.model_copy(update={**changes, "last_updated": utc_now()})


class AuthUser(BaseModel):
    """An authenticated identity as returned by the identity provider."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    id_token: Optional[str] = Field(default=None, repr=False)
    refresh_token: Optional[str] = Field(default=None, repr=False)


class AuthSession(BaseModel):
    """The active session: who is signed in and their resolved profile."""

    user: AuthUser
    profile: UserProfile
    started_at: datetime = Field(default_factory=utc_now)
