"""
Pydantic schemas for personal access tokens.

Read models never carry the salt or the value hash. The display value only
ever appears on the one-time creation result.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import DESCRIPTION_MAX_LENGTH
from ..enums import AccessTokenState


class AccessTokenCreate(BaseModel):
    """Input accepted when issuing a new token."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    username: str = Field(..., min_length=1, max_length=255)
    auth_config_id: str = Field(..., min_length=1, max_length=255)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v):
        return "" if v is None else v


class AccessTokenRead(BaseModel):
    """Public view of a stored access token."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    description: str
    username: str
    auth_config_id: str
    created_at: datetime
    last_used_at: Optional[datetime] = None
    revoked: bool = False
    revoked_at: Optional[datetime] = None
    revoke_cause: str = ""
    revoked_by: Optional[str] = None

    @field_validator("revoke_cause", mode="before")
    @classmethod
    def blank_revoke_cause(cls, v):
        """An absent cause reads as an empty string, never None."""
        return "" if v is None else v

    @property
    def state(self) -> AccessTokenState:
        return AccessTokenState.REVOKED if self.revoked else AccessTokenState.ACTIVE


class AccessTokenWithDisplayValue(BaseModel):
    """Result of token creation: the stored record plus its one-time display value."""

    model_config = ConfigDict(frozen=True)

    access_token: AccessTokenRead
    display_value: str = Field(..., repr=False)

    @property
    def id(self) -> int:
        return self.access_token.id
