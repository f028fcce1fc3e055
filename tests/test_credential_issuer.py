try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import re

import pytest

from app.services import SecretsCredentialIssuer


def test_session_ids_are_cookie_safe_and_long() -> None:
    session_id = SecretsCredentialIssuer().generate_auth()

    assert re.fullmatch(r"[A-Za-z0-9_-]{43}", session_id)


def test_session_ids_do_not_repeat() -> None:
    issuer = SecretsCredentialIssuer()

    issued = {issuer.generate_auth() for _ in range(1000)}

    assert len(issued) == 1000


def test_low_entropy_is_refused() -> None:
    with pytest.raises(ValueError):
        SecretsCredentialIssuer(nbytes=8)
