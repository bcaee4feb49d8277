from dnstoggle.settings import get_settings


def test_get_settings_is_cached():
    get_settings.cache_clear()
    s1 = get_settings()
    s2 = get_settings()
    assert s1 is s2  # lru_cache returns the same instance


def test_env_overrides_and_cache_clear(monkeypatch):
    monkeypatch.setenv("PROFILE_DISABLE_DURATION_SECONDS", "900")
    monkeypatch.setenv("RETRY_PRESET", "aggressive")
    get_settings.cache_clear()
    s = get_settings()
    assert s.profile_disable_duration_seconds == 900
    assert s.retry_preset == "aggressive"

    monkeypatch.delenv("PROFILE_DISABLE_DURATION_SECONDS", raising=False)
    monkeypatch.delenv("RETRY_PRESET", raising=False)
    get_settings.cache_clear()
    s2 = get_settings()
    assert s2.profile_disable_duration_seconds != 900


def test_defaults_match_the_controld_api():
    get_settings.cache_clear()
    s = get_settings()
    assert s.api_base_url == "https://api.controld.com"
    assert s.request_timeout_seconds == 30.0
    assert s.resource_timeout_seconds == 60.0
    assert s.api_key_prefix == "api."
    get_settings.cache_clear()
