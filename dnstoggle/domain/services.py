# dnstoggle/domain/services.py
from __future__ import annotations

import hashlib
from dataclasses import dataclass

from dnstoggle.domain.errors import InvalidCredential


def validate_credential(
    token: str | None,
    *,
    prefix: str = "api.",
    min_length: int = 20,
    max_length: int = 100,
) -> str:
    """
    Return the stripped token if it looks like a ControlD API key,
    otherwise raise InvalidCredential. Never talks to the network.
    """
    if token is None:
        raise InvalidCredential("no API key configured")
    token = token.strip()
    if not token:
        raise InvalidCredential("API key is empty")
    if not token.startswith(prefix):
        raise InvalidCredential(f"API key must start with '{prefix}'")
    if len(token) < min_length:
        raise InvalidCredential(f"API key must be at least {min_length} characters")
    if len(token) > max_length:
        raise InvalidCredential(f"API key must be at most {max_length} characters")
    return token


@dataclass(frozen=True)
class CredentialPolicy:
    prefix: str = "api."
    min_length: int = 20
    max_length: int = 100

    def validate(self, token: str | None) -> str:
        return validate_credential(
            token,
            prefix=self.prefix,
            min_length=self.min_length,
            max_length=self.max_length,
        )


def redact(secret: str) -> str:
    """First and last four characters, the rest masked. Short values fully masked."""
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:4]}{'*' * (len(secret) - 8)}{secret[-4:]}"


def fingerprint(secret: str) -> str:
    """Stable, non-reversible short id for a secret (used in cache keys)."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()[:16]


def disable_until_for(now: float, duration_seconds: float) -> int:
    return int(now + duration_seconds)


def next_disable_ttl(currently_disabled: bool, now: float, duration_seconds: float) -> int:
    """
    Value to PUT as disable_ttl: 0 re-enables a disabled profile,
    now + duration disables an enabled one.
    """
    if currently_disabled:
        return 0
    return disable_until_for(now, duration_seconds)


def format_duration(seconds: float) -> str:
    seconds = int(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes = rest // 60
    if hours and minutes:
        return f"{hours}h {minutes}m"
    if hours:
        return f"{hours}h"
    if minutes:
        return f"{minutes}m"
    return f"{seconds}s"
