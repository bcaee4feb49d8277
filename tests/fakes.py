from typing import Any, Optional

from dnstoggle.domain.entities import AuditEvent, Profile
from dnstoggle.domain.errors import SecretStoreError

VALID_KEY = "api.abcdefghijklmnopqrstuvwxyz"
KEY_NAME = "controld-api-key"


class FakeProfilesApi:
    """
    In-memory ControlD account. set_disable_until() mutates the stored
    profiles so a follow-up list reflects the update.
    """

    def __init__(self, profiles: Optional[list[Profile]] = None):
        self.profiles: dict[str, Profile] = {p.id: p for p in profiles or []}
        self.list_calls = 0
        self.update_calls: list[tuple[str, str, int]] = []
        self.list_errors: list[Optional[Exception]] = []
        self.update_errors: list[Exception] = []
        # when False, updates are accepted but not applied
        self.apply_updates = True
        self.message: Optional[str] = "Profile updated"

    async def list_profiles(self, credential: str) -> list[Profile]:
        self.list_calls += 1
        if self.list_errors:
            # None entries let that call through
            err = self.list_errors.pop(0)
            if err is not None:
                raise err
        return list(self.profiles.values())

    async def set_disable_until(
        self, credential: str, profile_id: str, disable_ttl: int
    ) -> Optional[str]:
        self.update_calls.append((credential, profile_id, disable_ttl))
        if self.update_errors:
            raise self.update_errors.pop(0)
        if self.apply_updates:
            p = self.profiles[profile_id]
            self.profiles[profile_id] = Profile(
                id=p.id,
                name=p.name,
                updated=p.updated + 1,
                disable_until=disable_ttl or None,
            )
        return self.message


class FakeSecretStore:
    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        self.values[key] = value

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)


class FakeErroredSecretStore(FakeSecretStore):
    async def get(self, key: str) -> Optional[str]:
        raise SecretStoreError("Redis down")


class FakePreferences:
    def __init__(self, selected: Optional[tuple[str, str]] = None):
        self.selected = selected

    async def get_selected_profile(self) -> Optional[tuple[str, str]]:
        return self.selected

    async def set_selected_profile(self, profile_id: str, profile_name: str) -> None:
        self.selected = (profile_id, profile_name)

    async def clear(self) -> None:
        self.selected = None


class FakeErroredPreferences(FakePreferences):
    async def get_selected_profile(self) -> Optional[tuple[str, str]]:
        raise SecretStoreError("Redis down")


class FakeNotifier:
    def __init__(self):
        self.calls: list[tuple[Any, ...]] = []

    async def profile_disabled(self, profile_name: str, duration_seconds: float) -> None:
        self.calls.append(("disabled", profile_name, duration_seconds))

    async def profile_enabled(self, profile_name: str) -> None:
        self.calls.append(("enabled", profile_name))

    async def disable_expired(self, profile_name: str) -> None:
        self.calls.append(("expired", profile_name))

    async def aclose(self) -> None:
        pass


class FakeFailingNotifier(FakeNotifier):
    async def profile_disabled(self, profile_name: str, duration_seconds: float) -> None:
        raise RuntimeError("webhook down")

    async def profile_enabled(self, profile_name: str) -> None:
        raise RuntimeError("webhook down")

    async def disable_expired(self, profile_name: str) -> None:
        raise RuntimeError("webhook down")


class FakeAuditLog:
    def __init__(self):
        self.events: list[AuditEvent] = []

    async def record(self, event: AuditEvent) -> None:
        event.id = len(self.events) + 1
        self.events.append(event)

    async def recent(self, limit: int = 50) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]

    @property
    def kinds(self) -> list[tuple[str, bool]]:
        return [(e.event, e.success) for e in self.events]


class FakeErroredAuditLog(FakeAuditLog):
    async def record(self, event: AuditEvent) -> None:
        raise RuntimeError("Postgres down")


class NoSleepRetry:
    """RetryPolicy wrapper that records backoffs instead of sleeping."""

    def __init__(self, policy):
        self.policy = policy
        self.sleeps: list[float] = []

    async def execute(self, operation):
        async def _sleep(delay: float) -> None:
            self.sleeps.append(delay)

        return await self.policy.execute(operation, sleep=_sleep)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
