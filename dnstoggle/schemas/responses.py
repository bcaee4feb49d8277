from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from dnstoggle.domain.entities import AuditEvent, Profile, ProfileStatus, ToggleResult


class ProfileOut(BaseModel):
    id: str = Field(..., description="The profile identifier (PK)")
    name: str = Field(..., description="The display name of the profile")
    disabled: bool
    disable_until: Optional[int] = None

    @classmethod
    def from_entity(cls, profile: Profile, now: float) -> "ProfileOut":
        disabled = profile.is_disabled(now)
        return cls(
            id=profile.id,
            name=profile.name,
            disabled=disabled,
            disable_until=profile.disable_until if disabled else None,
        )


class StatusOut(BaseModel):
    profile_id: str
    profile_name: str
    status: Literal["Enabled", "Disabled"]
    disable_until: Optional[int] = None
    remaining_seconds: float = 0.0

    @classmethod
    def from_status(cls, status: ProfileStatus) -> "StatusOut":
        return cls(
            profile_id=status.profile.id,
            profile_name=status.profile.name,
            status=status.description,
            disable_until=status.disable_until,
            remaining_seconds=round(status.remaining_seconds, 1),
        )


class ToggleOut(BaseModel):
    profile_id: str
    profile_name: str
    action: Literal["disabled", "enabled"]
    disable_until: int
    verified: bool
    message: Optional[str] = None
    warning: Optional[str] = None

    @classmethod
    def from_result(cls, result: ToggleResult) -> "ToggleOut":
        return cls(
            profile_id=result.profile_id,
            profile_name=result.profile_name,
            action=result.action,
            disable_until=result.disable_until,
            verified=result.verified,
            message=result.message,
            warning=str(result.warning) if result.warning else None,
        )


class RefreshOut(BaseModel):
    refreshed: bool


class AuditEventOut(BaseModel):
    event: str
    success: bool
    details: dict[str, str]
    occurred_at: datetime

    @classmethod
    def from_entity(cls, event: AuditEvent) -> "AuditEventOut":
        return cls(
            event=event.event,
            success=event.success,
            details=event.details,
            occurred_at=event.occurred_at,
        )


class OkOut(BaseModel):
    status: Literal["ok"] = "ok"


class CredentialOut(BaseModel):
    api_key: str = Field(..., description="The stored key, redacted")
