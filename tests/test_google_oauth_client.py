try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.clients import GoogleOAuthClient, OAuthTokenExchangeError, OAuthTokenRevocationError
from app.core.config import DRIVE_SCOPE


class RecordingTransport(httpx.MockTransport):
    def __init__(self, response: httpx.Response) -> None:
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return response

        super().__init__(handler)


def _form(request: httpx.Request) -> dict[str, list[str]]:
    return parse_qs(request.content.decode("utf-8"))


def test_authorization_url_has_exactly_the_flow_parameters() -> None:
    url = GoogleOAuthClient().build_authorization_url(
        client_id="client id",
        redirect_uri="https://www.test.com/auth",
        scope=DRIVE_SCOPE,
        state="%3Fq%3Dsearch",
    )

    parsed = urlparse(url)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == GoogleOAuthClient.AUTH_BASE_URL
    assert parse_qs(parsed.query) == {
        "client_id": ["client id"],
        "redirect_uri": ["https://www.test.com/auth"],
        "response_type": ["code"],
        "scope": [DRIVE_SCOPE],
        "state": ["%3Fq%3Dsearch"],
    }


@pytest.mark.anyio
async def test_exchange_posts_form_and_returns_token() -> None:
    transport = RecordingTransport(
        httpx.Response(200, json={"access_token": "access_token", "expires_in": 100, "scope": DRIVE_SCOPE})
    )
    client = GoogleOAuthClient(transport=transport)

    token = await client.exchange_code(
        client_id="client id",
        client_secret="client secret",
        redirect_uri="https://www.test.com/auth",
        code="a_code",
    )

    assert token.access_token == "access_token"
    assert token.expires_in == 100
    (request,) = transport.requests
    assert request.method == "POST"
    assert str(request.url) == GoogleOAuthClient.TOKEN_URL
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert _form(request) == {
        "client_id": ["client id"],
        "client_secret": ["client secret"],
        "code": ["a_code"],
        "grant_type": ["authorization_code"],
        "redirect_uri": ["https://www.test.com/auth"],
    }


@pytest.mark.anyio
async def test_exchange_surfaces_google_error_payload() -> None:
    body = {"error": "invalid_grant", "error_description": "Bad Request"}
    client = GoogleOAuthClient(transport=RecordingTransport(httpx.Response(400, json=body)))

    with pytest.raises(OAuthTokenExchangeError) as excinfo:
        await client.exchange_code(
            client_id="id", client_secret="secret", redirect_uri="https://x/auth", code="c"
        )

    assert str(excinfo.value) == "invalid_grant"
    assert excinfo.value.payload == body


@pytest.mark.anyio
async def test_exchange_rejects_non_json_failure() -> None:
    client = GoogleOAuthClient(
        transport=RecordingTransport(httpx.Response(503, text="upstream unavailable"))
    )

    with pytest.raises(OAuthTokenExchangeError, match="upstream unavailable"):
        await client.exchange_code(
            client_id="id", client_secret="secret", redirect_uri="https://x/auth", code="c"
        )


@pytest.mark.anyio
async def test_exchange_rejects_incomplete_payload() -> None:
    client = GoogleOAuthClient(
        transport=RecordingTransport(httpx.Response(200, json={"token_type": "Bearer"}))
    )

    with pytest.raises(OAuthTokenExchangeError):
        await client.exchange_code(
            client_id="id", client_secret="secret", redirect_uri="https://x/auth", code="c"
        )


@pytest.mark.anyio
async def test_revoke_posts_token() -> None:
    transport = RecordingTransport(httpx.Response(200))

    await GoogleOAuthClient(transport=transport).revoke_token("a token")

    (request,) = transport.requests
    assert str(request.url) == GoogleOAuthClient.REVOKE_URL
    assert _form(request) == {"token": ["a token"]}


@pytest.mark.anyio
async def test_revoke_failure_carries_body() -> None:
    transport = RecordingTransport(httpx.Response(400, text='{"error": "invalid_token"}'))

    with pytest.raises(OAuthTokenRevocationError, match="invalid_token"):
        await GoogleOAuthClient(transport=transport).revoke_token("a token")


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.mark.anyio
async def test_exchange_connection_failure_is_an_exchange_error() -> None:
    client = GoogleOAuthClient(transport=httpx.MockTransport(_refuse))

    with pytest.raises(OAuthTokenExchangeError, match="connection refused") as excinfo:
        await client.exchange_code(
            client_id="id", client_secret="secret", redirect_uri="https://x/auth", code="c"
        )

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.anyio
async def test_revoke_connection_failure_is_a_revocation_error() -> None:
    client = GoogleOAuthClient(transport=httpx.MockTransport(_refuse))

    with pytest.raises(OAuthTokenRevocationError, match="connection refused"):
        await client.revoke_token("a token")
