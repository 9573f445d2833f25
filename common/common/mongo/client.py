from __future__ import annotations

import logging
import threading
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from .config import (
    get_mongo_db_name,
    get_mongo_uri,
    get_server_selection_timeout_ms,
)


logger = logging.getLogger(__name__)


_client: Optional[MongoClient] = None
_db: Optional[Database] = None
_lock = threading.Lock()


def get_client() -> MongoClient:
    """프로세스 전역 MongoClient 싱글톤을 반환한다.

    - MONGO_URI 에서 URI 를 읽고 ping 으로 연결을 검증한다.
    - MONGO_DB_NAME 이 없고 URI 에도 기본 DB 가 없으면 에러를 발생시킨다.
    - posts 컬렉션에 필요한 인덱스를 처음 연결할 때 한 번만 생성한다.
    """

    global _client, _db

    if _client is not None:
        return _client

    with _lock:
        if _client is not None:
            return _client

        client: MongoClient = MongoClient(
            get_mongo_uri(),
            serverSelectionTimeoutMS=get_server_selection_timeout_ms(),
            tz_aware=True,
        )

        try:
            client.admin.command("ping")
        except Exception as exc:  # noqa: BLE001
            client.close()
            raise RuntimeError(f"failed to connect to MongoDB: {exc}") from exc

        db_name = get_mongo_db_name()
        try:
            db = client[db_name] if db_name else client.get_default_database()
        except Exception as exc:  # noqa: BLE001
            client.close()
            raise RuntimeError(
                "MongoDB database name must be specified via MONGO_DB_NAME or in MONGO_URI (mongodb://.../db_name)",
            ) from exc

        try:
            _ensure_indexes(db)
        except Exception as exc:  # noqa: BLE001
            logger.error("failed to ensure MongoDB indexes: %s", exc)
            client.close()
            raise

        _client = client
        _db = db
        logger.info("MongoDB connected and indexes ensured (db=%s)", db.name)
        return _client


def get_database() -> Database:
    """전역 기본 Database 객체를 반환한다. (FastAPI Depends 로도 사용)"""

    if _db is None:
        get_client()
    assert _db is not None  # get_client 가 실패했다면 예외가 이미 발생했어야 한다.
    return _db


def ping() -> bool:
    """헬스체크용 연결 확인. 연결 실패는 False 로 돌려준다."""

    try:
        get_client().admin.command("ping")
    except Exception as exc:  # noqa: BLE001
        logger.warning("MongoDB ping failed: %s", exc)
        return False
    return True


def close_client() -> None:
    global _client, _db

    with _lock:
        if _client is not None:
            _client.close()
        _client = None
        _db = None


def _ensure_indexes(db: Database) -> None:
    """posts 컬렉션 인덱스를 생성한다. 같은 이름으로 다시 만들어도 MongoDB 가 무시한다."""

    posts = db["posts"]

    # 최신순 목록 조회
    posts.create_index(
        [("created_at", DESCENDING), ("_id", DESCENDING)],
        name="idx_created_at_id_desc",
    )

    # 작성자 기준 조회
    posts.create_index(
        [("user", ASCENDING)],
        name="idx_user",
    )

    posts.create_index(
        [("comments._id", ASCENDING)],
        name="idx_comments_id",
    )
