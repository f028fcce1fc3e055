try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import sqlite3

import pytest
from botocore.exceptions import ClientError

from app.clients import DynamoDBSessionStore, SessionStoreError, SQLiteSessionStore
from app.core.config import AWSSettings
from app.services.token_cipher import TokenCipherService

NOW = 1_700_000_000


class FakeClock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeTable:
    """Mimics the boto3 Table calls; like DynamoDB it never expires items on its own."""

    def __init__(self) -> None:
        self.items: dict[tuple[str, str], dict] = {}
        self.error: ClientError | None = None

    def _raise(self, operation: str) -> None:
        if self.error is not None:
            raise self.error

    def put_item(self, *, Item: dict) -> dict:
        self._raise("PutItem")
        self.items[(Item["pk"], Item["sk"])] = dict(Item)
        return {}

    def get_item(self, *, Key: dict, ConsistentRead: bool = False) -> dict:
        self._raise("GetItem")
        item = self.items.get((Key["pk"], Key["sk"]))
        return {"Item": item} if item else {}

    def delete_item(self, *, Key: dict) -> dict:
        self._raise("DeleteItem")
        self.items.pop((Key["pk"], Key["sk"]), None)
        return {}


@pytest.fixture()
def cipher() -> TokenCipherService:
    return TokenCipherService(secret="store-secret")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def table() -> FakeTable:
    return FakeTable()


@pytest.fixture(params=["dynamodb", "sqlite"])
def store(request, tmp_path, cipher, clock, table):
    if request.param == "dynamodb":
        return DynamoDBSessionStore(AWSSettings(), token_cipher=cipher, table=table, clock=clock)
    return SQLiteSessionStore(str(tmp_path / "sessions.db"), token_cipher=cipher, clock=clock)


pytestmark = pytest.mark.anyio


async def test_saved_session_is_returned(store) -> None:
    await store.save("session-1", "token-1", NOW + 60)

    assert await store.get("session-1") == "token-1"


async def test_unknown_session_is_absent(store) -> None:
    assert await store.get("never-saved") is None


async def test_save_overwrites_existing_mapping(store) -> None:
    await store.save("session-1", "token-1", NOW + 60)
    await store.save("session-1", "token-2", NOW + 120)

    assert await store.get("session-1") == "token-2"


async def test_session_is_absent_once_expiration_is_reached(store, clock) -> None:
    await store.save("session-1", "token-1", NOW + 60)

    clock.now = NOW + 59
    assert await store.get("session-1") == "token-1"

    clock.now = NOW + 60
    assert await store.get("session-1") is None


async def test_remove_is_idempotent(store) -> None:
    await store.save("session-1", "token-1", NOW + 60)

    await store.remove("session-1")
    await store.remove("session-1")
    await store.remove("never-saved")

    assert await store.get("session-1") is None


async def test_sessions_without_expiration_are_rejected(store) -> None:
    with pytest.raises(ValueError):
        await store.save("session-1", "token-1", 0)


async def test_dynamodb_item_carries_ttl_and_encrypted_token(table, cipher, clock) -> None:
    store = DynamoDBSessionStore(AWSSettings(), token_cipher=cipher, table=table, clock=clock)

    await store.save("abc", "secret-token", NOW + 3600)

    item = table.items[("session#abc", "token")]
    assert item["expires_at"] == NOW + 3600
    assert item["token_encrypted"] != "secret-token"
    assert cipher.decrypt(item["token_encrypted"]) == "secret-token"


async def test_dynamodb_errors_surface_as_store_errors(table, cipher, clock) -> None:
    store = DynamoDBSessionStore(AWSSettings(), token_cipher=cipher, table=table, clock=clock)
    table.error = ClientError(
        {"Error": {"Code": "ResourceNotFoundException", "Message": "no such table"}},
        "GetItem",
    )

    with pytest.raises(SessionStoreError):
        await store.get("abc")


async def test_token_encrypted_with_another_secret_reads_as_absent(table, clock) -> None:
    writer = DynamoDBSessionStore(
        AWSSettings(), token_cipher=TokenCipherService(secret="old"), table=table, clock=clock
    )
    reader = DynamoDBSessionStore(
        AWSSettings(), token_cipher=TokenCipherService(secret="new"), table=table, clock=clock
    )

    await writer.save("abc", "token", NOW + 60)

    assert await reader.get("abc") is None


async def test_sqlite_purges_expired_rows_on_write(tmp_path, cipher, clock) -> None:
    store = SQLiteSessionStore(str(tmp_path / "sessions.db"), token_cipher=cipher, clock=clock)
    await store.save("old", "token-old", NOW + 10)

    clock.now = NOW + 20
    await store.save("new", "token-new", NOW + 100)

    with store._transaction() as conn:
        rows = conn.execute("SELECT session_id FROM sessions").fetchall()
    assert [row["session_id"] for row in rows] == ["new"]


async def test_sqlite_closes_each_connection(tmp_path, cipher, clock) -> None:
    store = SQLiteSessionStore(str(tmp_path / "sessions.db"), token_cipher=cipher, clock=clock)
    opened: list[sqlite3.Connection] = []
    connect = store._connect

    def tracking_connect() -> sqlite3.Connection:
        conn = connect()
        opened.append(conn)
        return conn

    store._connect = tracking_connect
    await store.save("abc", "token", NOW + 100)
    assert await store.get("abc") == "token"
    await store.remove("abc")

    assert len(opened) == 3
    for conn in opened:
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")
