"""
설정: default.yaml → DashboardSettings

탐색 순서:
1. 명시적 path 인자
2. $VELLUM_CONFIG
3. <프로젝트 루트>/default.yaml

파일 안의 상대 경로는 설정 파일의 디렉터리 기준으로 해석.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from vellum.domain.constants import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_JPEG_QUALITY,
)
from vellum.domain.errors import DashboardError, ErrorCodes

PROJECT_ROOT = Path(__file__).parent.parent.parent


@dataclass(frozen=True)
class DashboardSettings:
    """대시보드 프로세스 하나의 확정된 설정."""
    site_name: str
    uploads_dir: Path
    data_dir: Path
    sections_path: Path
    tmp_dir: Path
    cache_dir: Path
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    log_level: str = "INFO"
    lock_retry_interval: float = 0.5
    lock_max_retries: int = 10


def resolve_config_path(config_path: Path | None = None) -> Path:
    if config_path is not None:
        return config_path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return PROJECT_ROOT / DEFAULT_CONFIG_FILENAME


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    YAML 설정 파일 로드.

    Args:
        config_path: 설정 파일 (탐색 순서는 모듈 docstring 참고)

    Returns:
        파싱된 설정 (파일이 없으면 {})
    """
    path = resolve_config_path(config_path)
    if not path.exists():
        return {}

    with open(path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise DashboardError(ErrorCodes.CONFIG_INVALID, path=str(path))
    return data


def settings_from_config(config: dict[str, Any], base_dir: Path) -> DashboardSettings:
    """
    파싱된 설정으로 settings 생성.

    Args:
        config: 파싱된 설정 매핑
        base_dir: 상대 경로의 기준 디렉터리

    Returns:
        DashboardSettings
    """
    paths = config.get("paths", {}) or {}
    uploads = config.get("uploads", {}) or {}
    store = config.get("store", {}) or {}

    def resolve(key: str, default: str) -> Path:
        path = Path(paths.get(key, default))
        return path if path.is_absolute() else base_dir / path

    data_dir = resolve("data_dir", "data")
    try:
        return DashboardSettings(
            site_name=str((config.get("site", {}) or {}).get("name", "Vellum")),
            uploads_dir=resolve("uploads_dir", "data/uploads"),
            data_dir=data_dir,
            sections_path=resolve("sections", "sections.yaml"),
            tmp_dir=resolve("tmp_dir", "data/tmp"),
            cache_dir=resolve("cache_dir", "data/cache"),
            jpeg_quality=int(uploads.get("jpeg_quality", DEFAULT_JPEG_QUALITY)),
            log_level=str((config.get("logging", {}) or {}).get("level", "INFO")),
            lock_retry_interval=float(store.get("lock_retry_interval", 0.5)),
            lock_max_retries=int(store.get("lock_max_retries", 10)),
        )
    except (TypeError, ValueError) as e:
        raise DashboardError(ErrorCodes.CONFIG_INVALID, error=str(e)) from e


def load_settings(config_path: Path | None = None) -> DashboardSettings:
    """load_config + settings_from_config."""
    path = resolve_config_path(config_path)
    return settings_from_config(load_config(path), path.parent)
