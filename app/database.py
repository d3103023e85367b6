# app/database.py
"""
MongoDB 연결 관리.

- resolve_mongodb_uri: 명시 인자 → MONGODB_URI(.env/.env.local 포함) → 로컬 폴백 순서로 URI 결정
- MongoConnectionManager: 프로세스 당 하나의 클라이언트를 지연 연결하고 캐시
- get_db: FastAPI 의존성 주입용 (app.state.mongo 에 있는 매니저 사용)
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Callable, Mapping

from fastapi import Request
from pymongo import AsyncMongoClient

from app.models.deck import DECK_COLLATION, DECK_COLLECTION, DECK_INDEXES
from app.models.user_choice import USER_CHOICE_COLLECTION, USER_CHOICE_INDEXES
from config import DEFAULT_DB_NAME, DEFAULT_MONGODB_URI, env_flag

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """배포 설정 누락 (운영 환경에서 MONGODB_URI 없음 등)."""


def resolve_mongodb_uri(explicit: str | None = None, environ: Mapping[str, str] | None = None) -> str:
    if environ is None:
        environ = os.environ

    for candidate in (explicit, environ.get("MONGODB_URI")):
        if candidate and candidate.strip():
            uri = candidate.strip()
            break
    else:
        app_env = environ.get("APP_ENV", "development")
        allow_local = env_flag(environ.get("ALLOW_LOCAL_MONGODB"), default=app_env != "production")
        if not allow_local:
            raise ConfigurationError(
                f"MONGODB_URI가 설정되지 않았습니다 (APP_ENV={app_env}). "
                "로컬 DB를 쓰려면 ALLOW_LOCAL_MONGODB=1 을 명시하세요."
            )
        uri = DEFAULT_MONGODB_URI

    if uri == DEFAULT_MONGODB_URI:
        logger.warning(
            "MONGODB_URI 기본값 사용 중: %s. 환경 변수를 설정하세요 "
            "(.env.local 에 MONGODB_URI=mongodb+srv://...)",
            uri,
        )
    return uri


class MongoConnectionManager:
    """
    MongoDB 클라이언트 캐시.

    acquire_connection()은 캐시된 클라이언트가 있으면 바로 반환하고, 연결 시도가 진행 중이면
    동시 호출자 모두가 같은 시도를 기다린다 (동시에 진행되는 시도는 최대 1개).
    실패하면 진행 중 표시를 지우고 예외를 그대로 전달하므로 다음 호출에서 새로 연결한다.
    """

    def __init__(
        self,
        uri: str | None = None,
        db_name: str | None = None,
        environ: Mapping[str, str] | None = None,
        client_factory: Callable[..., Any] = AsyncMongoClient,
        **client_options: Any,
    ):
        self.uri = resolve_mongodb_uri(uri, environ)
        self.db_name = db_name
        self._client_factory = client_factory
        self._client_options = client_options
        self._client = None
        self._pending: asyncio.Task | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def acquire_connection(self):
        if self._client is not None:
            return self._client

        if self._pending is None:
            self._pending = asyncio.create_task(self._establish())

        # 대기 중인 호출자 하나가 취소되어도 공유 연결 시도는 계속 진행
        return await asyncio.shield(self._pending)

    async def _establish(self):
        try:
            client = await self._connect()
        except Exception as e:
            logger.error("MongoDB 연결 실패: %s", e)
            raise
        finally:
            self._pending = None
        self._client = client
        return client

    async def _connect(self):
        client = self._client_factory(self.uri, **self._client_options)
        try:
            await client.admin.command("ping")
        except Exception:
            await client.close()
            raise
        logger.info("MongoDB 연결됨")
        return client

    async def release_connection(self) -> None:
        if self._client is None:
            return
        client = self._client
        self._client = None
        self._pending = None
        await client.close()
        logger.info("MongoDB 연결 해제")

    async def get_database(self):
        client = await self.acquire_connection()
        if self.db_name:
            return client.get_database(self.db_name)
        return client.get_default_database(default=DEFAULT_DB_NAME)

    async def ensure_indexes(self) -> None:
        await ensure_indexes(await self.get_database())


async def ensure_indexes(db) -> None:
    """컬렉션 생성(덱은 es/strength=2 collation) 및 인덱스 선언. 이미 있으면 그대로 둔다."""
    if DECK_COLLECTION not in await db.list_collection_names():
        await db.create_collection(DECK_COLLECTION, collation=DECK_COLLATION)
    await db[DECK_COLLECTION].create_indexes(DECK_INDEXES)
    await db[USER_CHOICE_COLLECTION].create_indexes(USER_CHOICE_INDEXES)


# DB 의존성 주입용
async def get_db(request: Request):
    manager: MongoConnectionManager = request.app.state.mongo
    return await manager.get_database()
