from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from dnstoggle.domain.errors import VerificationFailed


@dataclass(frozen=True)
class Profile:
    id: str
    name: str
    updated: int = 0
    # Absolute unix timestamp; None or <= now means enabled.
    disable_until: int | None = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("profile id is required")

    def is_disabled(self, now: float) -> bool:
        return self.disable_until is not None and self.disable_until > now

    def remaining_seconds(self, now: float) -> float:
        if not self.is_disabled(now):
            return 0.0
        return float(self.disable_until) - now


@dataclass(frozen=True)
class ProfileStatus:
    profile: Profile
    disabled: bool
    disable_until: int | None = None
    remaining_seconds: float = 0.0

    @classmethod
    def of(cls, profile: Profile, now: float) -> "ProfileStatus":
        disabled = profile.is_disabled(now)
        return cls(
            profile=profile,
            disabled=disabled,
            disable_until=profile.disable_until if disabled else None,
            remaining_seconds=profile.remaining_seconds(now),
        )

    @property
    def description(self) -> str:
        return "Disabled" if self.disabled else "Enabled"


@dataclass
class ToggleResult:
    profile_id: str
    profile_name: str
    action: Literal["disabled", "enabled"]
    disable_until: int
    verified: bool = False
    message: str | None = None
    warning: VerificationFailed | None = None

    @property
    def disabled(self) -> bool:
        return self.action == "disabled"


AuditEventType = Literal[
    "API_KEY_ADDED",
    "API_KEY_UPDATED",
    "API_KEY_REMOVED",
    "API_KEY_VALIDATED",
    "PROFILE_SELECTED",
    "PROFILE_DISABLED",
    "PROFILE_ENABLED",
]


@dataclass
class AuditEvent:
    event: AuditEventType
    success: bool
    details: dict[str, str] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None
