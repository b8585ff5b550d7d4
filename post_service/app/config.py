from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

import yaml

from common.models.user import AuthMode

from .authorization import ADMIN_ROLE


DEFAULT_CONFIG_FILE_NAME = "config.yaml"
DEFAULT_PORT = 8003

AUTH_MODE_ENV = "POST_SERVICE_AUTH_MODE"
ADMIN_ROLE_ENV = "POST_SERVICE_ADMIN_ROLE"
PORT_ENV = "POST_SERVICE_PORT"


@dataclass(slots=True)
class PostServiceConfig:
    auth_mode: AuthMode = AuthMode.REQUIRED
    admin_role: str = ADMIN_ROLE


@dataclass(slots=True)
class AppConfig:
    """post-service 설정 루트.

    - config.yaml 의 post_service 섹션을 읽고, 환경 변수가 있으면 그 값으로 덮어쓴다.
    - Mongo 연결 정보는 common.mongo.config 가 환경 변수에서 직접 읽는다.
    """

    post_service: PostServiceConfig = field(default_factory=PostServiceConfig)
    port: int = DEFAULT_PORT


def _find_config_path() -> Path | None:
    """현재 작업 디렉토리부터 상위로 올라가며 config.yaml 을 찾는다. 없으면 None."""

    current = Path.cwd()
    for directory in (current, *current.parents):
        candidate = directory / DEFAULT_CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def _parse_auth_mode(raw: object, source: str) -> AuthMode:
    value = str(raw).strip().lower()
    try:
        return AuthMode(value)
    except ValueError as exc:
        allowed = ", ".join(m.value for m in AuthMode)
        raise RuntimeError(
            f"invalid auth_mode in {source}: {raw!r} (allowed: {allowed})",
        ) from exc


def _parse_port(raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"invalid {PORT_ENV}: {raw!r}") from exc


def load_post_service_config(path: Path | None = None) -> PostServiceConfig:
    if path is None:
        path = _find_config_path()

    section: dict = {}
    if path is not None:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        section = data.get("post_service") or {}
        if not isinstance(section, dict):
            raise RuntimeError(f"post_service section in {path} must be a mapping")

    cfg = PostServiceConfig()
    source = str(path) if path is not None else "defaults"

    if "auth_mode" in section:
        cfg.auth_mode = _parse_auth_mode(section["auth_mode"], source)
    admin_role = str(section.get("admin_role") or "").strip()
    if admin_role:
        cfg.admin_role = admin_role

    env_mode = os.getenv(AUTH_MODE_ENV, "").strip()
    if env_mode:
        cfg.auth_mode = _parse_auth_mode(env_mode, AUTH_MODE_ENV)
    env_role = os.getenv(ADMIN_ROLE_ENV, "").strip()
    if env_role:
        cfg.admin_role = env_role

    return cfg


def load_config(path: Path | None = None) -> AppConfig:
    """post-service 설정을 로드하여 AppConfig 로 반환한다."""

    raw_port = os.getenv(PORT_ENV, "").strip()
    port = _parse_port(raw_port) if raw_port else DEFAULT_PORT
    return AppConfig(post_service=load_post_service_config(path), port=port)


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    """FastAPI DI용 설정 싱글톤. 테스트에서는 dependency_overrides 로 교체한다."""

    return load_config()
