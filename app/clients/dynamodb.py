"""
Session persistence in DynamoDB.

The table is keyed by ``pk``/``sk`` and has TTL enabled on ``expires_at``.
DynamoDB deletes expired items lazily, so reads also discard items whose
``expires_at`` has passed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.clients.session_store import SessionStoreError, require_expiration
from app.core.config import AWSSettings
from app.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class DynamoDBSessionStore:
    """Session store backed by a DynamoDB table with TTL."""

    SORT_KEY = "token"

    def __init__(
        self,
        settings: AWSSettings,
        *,
        token_cipher: TokenCipherService,
        table: Any = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._cipher = token_cipher
        self._clock = clock
        if table is None:
            resource = boto3.resource("dynamodb", region_name=settings.region_name)
            table = resource.Table(settings.dynamodb_table_name)
        self._table = table

    @staticmethod
    def _key(session_id: str) -> Dict[str, str]:
        return {"pk": f"session#{session_id}", "sk": DynamoDBSessionStore.SORT_KEY}

    async def save(self, session_id: str, token: str, expiration: int) -> None:
        item: Dict[str, Any] = {
            **self._key(session_id),
            "token_encrypted": self._cipher.encrypt(token),
            "expires_at": require_expiration(expiration),
        }
        await self._call(self._table.put_item, Item=item)

    async def get(self, session_id: str) -> Optional[str]:
        response = await self._call(
            self._table.get_item, Key=self._key(session_id), ConsistentRead=True
        )
        item = response.get("Item")
        if not item:
            return None
        if int(item.get("expires_at", 0)) <= self._clock():
            return None
        try:
            return self._cipher.decrypt(item["token_encrypted"])
        except (KeyError, ValueError):
            logger.warning("Discarding unreadable session record %s", item.get("pk"))
            return None

    async def remove(self, session_id: str) -> None:
        await self._call(self._table.delete_item, Key=self._key(session_id))

    @staticmethod
    async def _call(func: Callable[..., Dict[str, Any]], **kwargs: Any) -> Dict[str, Any]:
        try:
            return await asyncio.to_thread(func, **kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise SessionStoreError(f"DynamoDB request failed: {exc}") from exc


__all__ = ["DynamoDBSessionStore"]
