from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


DEFAULT_CONFIG_FILE_NAME = "config.yaml"
JWT_SECRET_ENV = "JWT_SECRET"

DEFAULT_TOKEN_HEADER = "x-auth-token"
DEFAULT_JWT_ALGORITHM = "HS256"
DEFAULT_API_PREFIX = "/api"


@dataclass(frozen=True, slots=True)
class AuthConfig:
    jwt_secret: str = field(repr=False)
    jwt_algorithm: str = DEFAULT_JWT_ALGORITHM
    token_header: str = DEFAULT_TOKEN_HEADER


@dataclass(frozen=True, slots=True)
class ApiConfig:
    prefix: str = DEFAULT_API_PREFIX


@dataclass(frozen=True, slots=True)
class AppConfig:
    """post-service 설정 루트.

    앱 생성 시 한 번만 로드하고 이후에는 읽기 전용으로 사용한다.
    """

    auth: AuthConfig
    api: ApiConfig = field(default_factory=ApiConfig)


def _find_config_path() -> Path | None:
    """현재 작업 디렉토리부터 상위로 올라가며 config.yaml 을 찾는다.

    config.yaml 은 선택 사항이다. 없으면 None 을 반환하고 기본값과 환경 변수만 사용한다.
    """

    current = Path.cwd()
    for directory in (current, *current.parents):
        candidate = directory / DEFAULT_CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def _load_yaml(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise RuntimeError(f"invalid config file {path}: top level must be a mapping")
    return data


def _section(data: dict[str, Any], name: str, path: Path | None) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise RuntimeError(f"invalid {name} section in {path}: must be a mapping")
    return value


def load_auth_config(data: dict[str, Any], path: Path | None = None) -> AuthConfig:
    auth = _section(data, "auth", path)

    # 시크릿은 환경 변수를 우선하고, 로컬 개발용으로만 yaml 값을 허용한다.
    secret = os.getenv(JWT_SECRET_ENV) or str(auth.get("jwt_secret") or "")
    if not secret.strip():
        raise RuntimeError(
            f"{JWT_SECRET_ENV} environment variable is required for token verification",
        )

    algorithm = str(auth.get("jwt_algorithm") or DEFAULT_JWT_ALGORITHM).strip()
    token_header = str(auth.get("token_header") or DEFAULT_TOKEN_HEADER).strip().lower()
    if not token_header:
        raise RuntimeError(f"invalid auth.token_header in {path}: must not be blank")

    return AuthConfig(
        jwt_secret=secret,
        jwt_algorithm=algorithm,
        token_header=token_header,
    )


def load_api_config(data: dict[str, Any], path: Path | None = None) -> ApiConfig:
    api = _section(data, "api", path)
    prefix = str(api.get("prefix", DEFAULT_API_PREFIX)).strip().rstrip("/")
    if prefix and not prefix.startswith("/"):
        raise RuntimeError(f"invalid api.prefix in {path}: {prefix!r} must start with '/'")
    return ApiConfig(prefix=prefix)


def load_config() -> AppConfig:
    """config.yaml 과 환경 변수를 읽어 AppConfig 로 반환한다."""

    path = _find_config_path()
    data = _load_yaml(path)
    return AppConfig(
        auth=load_auth_config(data, path),
        api=load_api_config(data, path),
    )
