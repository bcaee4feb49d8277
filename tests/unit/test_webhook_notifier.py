import json
import pytest
import httpx

from dnstoggle.infrastructure.notify.webhook import HttpWebhookNotifier, LoggingNotifier

URL = "http://hooks.local/dns"


@pytest.mark.asyncio
async def test_profile_disabled_posts_event():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["json"] = json.loads(request.content.decode("utf-8"))
        return httpx.Response(204)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    notifier = HttpWebhookNotifier(URL, client=client)

    await notifier.profile_disabled("Work", 5400)
    assert seen["url"] == URL
    payload = seen["json"]
    assert payload["event"] == "profile_disabled"
    assert payload["profile"] == "Work"
    assert payload["duration_seconds"] == 5400
    assert payload["text"] == "Work disabled for 1h 30m"
    assert "at" in payload

    await client.aclose()


@pytest.mark.asyncio
async def test_enabled_and_expired_events():
    events = []

    def handler(request: httpx.Request) -> httpx.Response:
        events.append(json.loads(request.content.decode("utf-8"))["event"])
        return httpx.Response(200)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    notifier = HttpWebhookNotifier(URL, client=client)

    await notifier.profile_enabled("Work")
    await notifier.disable_expired("Work")
    assert events == ["profile_enabled", "disable_expired"]

    await client.aclose()


@pytest.mark.asyncio
async def test_non_2xx_raises_runtimeerror():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="nope")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    notifier = HttpWebhookNotifier(URL, client=client)

    with pytest.raises(RuntimeError) as ei:
        await notifier.profile_enabled("Work")

    msg = str(ei.value)
    assert "webhook responded 500" in msg
    assert "nope" in msg

    await client.aclose()


@pytest.mark.asyncio
async def test_network_error_is_wrapped_as_runtimeerror():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    notifier = HttpWebhookNotifier(URL, client=client)

    with pytest.raises(RuntimeError) as ei:
        await notifier.disable_expired("Work")

    assert "webhook HTTP error:" in str(ei.value)

    await client.aclose()


@pytest.mark.asyncio
async def test_aclose_closes_owned_client_only():
    owned = HttpWebhookNotifier(URL)
    await owned.aclose()
    assert owned._client.is_closed  # type: ignore[attr-defined]

    shared = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    not_owned = HttpWebhookNotifier(URL, client=shared)
    await not_owned.aclose()
    assert shared.is_closed is False

    await shared.aclose()


@pytest.mark.asyncio
async def test_logging_notifier_logs(caplog):
    caplog.set_level("INFO")
    notifier = LoggingNotifier()
    await notifier.profile_disabled("Work", 3600)
    await notifier.profile_enabled("Work")
    await notifier.disable_expired("Work")
    await notifier.aclose()
    assert "profile disabled" in caplog.text
    assert "profile enabled" in caplog.text
    assert "profile disable expired" in caplog.text
