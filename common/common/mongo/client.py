from __future__ import annotations

import logging
import threading
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from .config import get_mongo_db_name, get_mongo_uri, get_server_selection_timeout_ms


logger = logging.getLogger(__name__)

POSTS_COLLECTION = "posts"
COUNTERS_COLLECTION = "counters"


_client: Optional[MongoClient] = None
_db: Optional[Database] = None
_lock = threading.Lock()


def _connect() -> tuple[MongoClient, Database]:
    """클라이언트를 만들고 ping/DB 선택/인덱스 생성까지 끝낸다. 실패하면 클라이언트를 닫고 RuntimeError."""

    client: MongoClient = MongoClient(
        get_mongo_uri(),
        serverSelectionTimeoutMS=get_server_selection_timeout_ms(),
    )
    try:
        client.admin.command("ping")
        db_name = get_mongo_db_name()
        db = client[db_name] if db_name else client.get_default_database()
        _ensure_indexes(db)
    except Exception as exc:  # noqa: BLE001
        client.close()
        raise RuntimeError(f"failed to initialise MongoDB: {exc}") from exc
    return client, db


def get_database() -> Database:
    """프로세스 전역 Database 싱글톤. FastAPI Depends 로 주입된다.

    최초 호출 시 연결한다. MONGO_DB_NAME 이 없으면 URI 에 포함된 기본 DB 를 사용한다.
    """

    global _client, _db

    if _db is not None:
        return _db

    with _lock:
        if _db is None:
            _client, _db = _connect()
            logger.info("MongoDB connected and indexes ensured (db=%s)", _db.name)
        return _db


def close_client() -> None:
    """커넥션 풀을 닫는다. 연결한 적이 없으면 아무 일도 하지 않는다."""

    global _client, _db

    with _lock:
        if _client is None:
            return
        _client.close()
        _client, _db = None, None
        logger.info("MongoDB client closed")


def _ensure_indexes(db: Database) -> None:
    """posts 인덱스. 이미 있으면 MongoDB 가 무시한다."""

    posts = db[POSTS_COLLECTION]
    # 검색 결과 최신순 정렬
    posts.create_index(
        [("created_at", DESCENDING), ("_id", DESCENDING)],
        name="idx_created_at_id_desc",
    )
    # 유저 삭제 cascade
    posts.create_index([("owner_id", ASCENDING)], name="idx_owner_id")
