"""
레코드 저장소: data_dir 아래 records.json

규칙:
- records.json이 레코드 content의 유일한 원본
- 모든 read-modify-write는 디렉터리 락 안에서 수행
- 원자적 쓰기: temp → rename + fsync
- Stale 락: PID/hostname 메타데이터, 없으면 TTL

파일시스템 내구성은 best-effort:
- fsync 실패는 warning 로그만 남기고 쓰기는 완료
- 락 해제 실패는 수동 정리 안내와 함께 로그
"""

import json
import logging
import os
import socket
import tempfile
import time
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from vellum.core.hashing import compute_content_hash
from vellum.domain.constants import RECORDS_JSON_FILENAME
from vellum.domain.errors import DashboardError, ErrorCodes
from vellum.domain.schemas import Record

logger = logging.getLogger(__name__)

# Stale 락 판단 기준 (초) - 1시간
STALE_LOCK_THRESHOLD_SECONDS = 3600

LOCK_DIR_NAME = ".lock"
LOCK_META_FILENAME = "lock.meta"

# =============================================================================
# Lock Management
# =============================================================================


def _get_current_hostname() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return "unknown"


def _write_lock_meta(lock_dir: Path) -> None:
    """락 디렉터리에 PID, hostname, 생성 시각 기록."""
    meta_path = lock_dir / LOCK_META_FILENAME
    meta = {
        "pid": os.getpid(),
        "hostname": _get_current_hostname(),
        "created_at": datetime.now(UTC).isoformat(),
    }
    try:
        meta_path.write_text(json.dumps(meta), encoding="utf-8")
    except OSError as e:
        logger.warning("Failed to write lock meta %s: %s", meta_path, e)


def _read_lock_meta(lock_dir: Path) -> dict | None:
    try:
        return json.loads((lock_dir / LOCK_META_FILENAME).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None


def _is_process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
        return True
    except OSError:
        return False


def _is_stale_lock(
    lock_dir: Path, threshold_seconds: float = STALE_LOCK_THRESHOLD_SECONDS
) -> bool:
    """
    죽었거나 너무 오래된 소유자가 남긴 락 디렉터리인지 판단.

    1. meta 있음, 같은 호스트: 소유 PID 생존 여부
    2. meta 있음, 다른 호스트: created_at 기준 TTL
    3. meta 없음: 디렉터리 mtime 기준 TTL
    """
    meta = _read_lock_meta(lock_dir)

    if meta:
        lock_pid = meta.get("pid")
        if meta.get("hostname") == _get_current_hostname() and lock_pid:
            return not _is_process_alive(lock_pid)

        try:
            created_at = datetime.fromisoformat(meta.get("created_at", ""))
            return (datetime.now(UTC) - created_at).total_seconds() > threshold_seconds
        except (ValueError, TypeError):
            pass

    try:
        return time.time() - lock_dir.stat().st_mtime > threshold_seconds
    except OSError:
        return False


def _remove_lock_dir(lock_dir: Path) -> None:
    meta_path = lock_dir / LOCK_META_FILENAME
    if meta_path.exists():
        try:
            meta_path.unlink()
        except OSError:
            pass
    os.rmdir(lock_dir)


def _try_cleanup_stale_lock(lock_dir: Path) -> bool:
    if not _is_stale_lock(lock_dir):
        return False

    meta = _read_lock_meta(lock_dir)
    try:
        _remove_lock_dir(lock_dir)
    except OSError:
        return False

    owner = f" (owner: pid={meta.get('pid')}, host={meta.get('hostname')})" if meta else ""
    logger.warning("Cleaned up stale lock: %s%s", lock_dir, owner)
    return True


@contextmanager
def store_lock(
    data_dir: Path,
    retry_interval: float = 0.5,
    max_retries: int = 10,
) -> Generator[Path, None, None]:
    """
    records.json 접근용 디렉터리 락.

    Usage:
        with store_lock(data_dir):
            # records.json 읽기/쓰기

    Args:
        data_dir: 저장소 디렉터리
        retry_interval: 재시도 간격 (초)
        max_retries: 포기 전 최대 시도 횟수

    Yields:
        락 디렉터리 경로

    Raises:
        DashboardError: STORE_LOCK_TIMEOUT
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    lock_dir = data_dir / LOCK_DIR_NAME

    acquired = False
    for attempt in range(max_retries):
        try:
            os.mkdir(lock_dir)
            acquired = True
            _write_lock_meta(lock_dir)
            break
        except FileExistsError:
            if attempt == 0 and _try_cleanup_stale_lock(lock_dir):
                try:
                    os.mkdir(lock_dir)
                    acquired = True
                    _write_lock_meta(lock_dir)
                    break
                except FileExistsError:
                    pass
            time.sleep(retry_interval)

    if not acquired:
        raise DashboardError(
            ErrorCodes.STORE_LOCK_TIMEOUT,
            data_dir=str(data_dir),
            attempts=max_retries,
        )

    try:
        yield lock_dir
    finally:
        try:
            _remove_lock_dir(lock_dir)
        except OSError as e:
            logger.warning(
                "Lock release failed for %s: %s. Manual cleanup may be required: rm -rf %s",
                data_dir, e, lock_dir,
            )


# =============================================================================
# Atomic Write
# =============================================================================


def _fsync_dir(dir_path: Path) -> None:
    try:
        dir_fd = os.open(str(dir_path), os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
    except (OSError, AttributeError) as e:
        logger.warning("Directory fsync failed for %s: %s", dir_path, e)


def atomic_write_json(path: Path, data: Any) -> None:
    """
    원자적 JSON 쓰기.

    - 중간 상태 없음: temp 파일 → rename
    - 가능하면 파일과 디렉터리 fsync (실패 시 warning)
    - 실패 시 temp 파일 삭제, 기존 파일 유지

    Args:
        path: 대상 파일
        data: JSON 직렬화 가능한 데이터
    """
    dir_path = path.parent
    dir_path.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=dir_path,
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as f:
            temp_path = Path(f.name)
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError as e:
                logger.warning("File fsync failed for %s: %s", path, e)

        os.replace(temp_path, path)
        _fsync_dir(dir_path)

    except Exception:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise


# =============================================================================
# Record Store
# =============================================================================


class RecordStore:
    """
    JSON 파일 기반 레코드 저장.

    레코드 id는 증가하는 정수, position은 섹션 안의 순서
    (sortable 섹션).
    """

    def __init__(
        self,
        data_dir: Path,
        lock_retry_interval: float = 0.5,
        lock_max_retries: int = 10,
    ):
        self.data_dir = data_dir
        self.path = data_dir / RECORDS_JSON_FILENAME
        self.lock_retry_interval = lock_retry_interval
        self.lock_max_retries = lock_max_retries

    @contextmanager
    def _locked(self) -> Generator[None, None, None]:
        with store_lock(self.data_dir, self.lock_retry_interval, self.lock_max_retries):
            yield

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"next_id": 1, "records": []}
        try:
            data: dict[str, Any] = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise DashboardError(
                ErrorCodes.STORE_CORRUPT,
                path=str(self.path),
                error=str(e),
            ) from e
        data.setdefault("next_id", 1)
        data.setdefault("records", [])
        return data

    def _save(self, data: dict[str, Any]) -> None:
        atomic_write_json(self.path, data)

    def list_records(self, section: str) -> list[Record]:
        """섹션의 레코드 (position, id 순)."""
        records = [
            Record.from_dict(r) for r in self._load()["records"] if r["section"] == section
        ]
        records.sort(key=lambda r: (r.position, r.id))
        return records

    def get(self, record_id: int) -> Record:
        """
        Raises:
            DashboardError: RECORD_NOT_FOUND
        """
        for raw in self._load()["records"]:
            if int(raw["id"]) == record_id:
                return Record.from_dict(raw)
        raise DashboardError(ErrorCodes.RECORD_NOT_FOUND, record_id=record_id)

    def create(self, section: str, content: dict[str, Any]) -> Record:
        """섹션 끝에 새 레코드 추가."""
        with self._locked():
            data = self._load()
            now = datetime.now(UTC).isoformat()
            positions = [r.get("position", 0) for r in data["records"] if r["section"] == section]
            record = Record(
                id=data["next_id"],
                section=section,
                content=content,
                position=max(positions, default=-1) + 1,
                created_at=now,
                updated_at=now,
            )
            data["records"].append(record.to_dict())
            data["next_id"] += 1
            self._save(data)

        logger.info("Created record %s in section %s", record.id, section)
        return record

    def update(self, record_id: int, content: dict[str, Any]) -> tuple[Record, bool]:
        """
        레코드 content 교체.

        Returns:
            (record, changed) - content hash가 같으면 changed=False

        Raises:
            DashboardError: RECORD_NOT_FOUND
        """
        with self._locked():
            data = self._load()
            for raw in data["records"]:
                if int(raw["id"]) != record_id:
                    continue
                record = Record.from_dict(raw)
                if compute_content_hash(record.content) == compute_content_hash(content):
                    return record, False

                record.content = content
                record.updated_at = datetime.now(UTC).isoformat()
                raw.update(record.to_dict())
                self._save(data)
                logger.info("Updated record %s", record_id)
                return record, True

        raise DashboardError(ErrorCodes.RECORD_NOT_FOUND, record_id=record_id)

    def delete(self, record_id: int) -> Record:
        """
        Raises:
            DashboardError: RECORD_NOT_FOUND
        """
        with self._locked():
            data = self._load()
            for index, raw in enumerate(data["records"]):
                if int(raw["id"]) == record_id:
                    del data["records"][index]
                    self._save(data)
                    logger.info("Deleted record %s", record_id)
                    return Record.from_dict(raw)

        raise DashboardError(ErrorCodes.RECORD_NOT_FOUND, record_id=record_id)

    def reorder(self, record_id: int, to_index: int) -> list[Record]:
        """
        섹션 안에서 레코드 위치 이동.

        Args:
            record_id: 이동할 레코드
            to_index: 목표 인덱스 (섹션 범위로 clamp)

        Returns:
            새 순서의 섹션 레코드

        Raises:
            DashboardError: RECORD_NOT_FOUND
        """
        with self._locked():
            data = self._load()
            target = next((r for r in data["records"] if int(r["id"]) == record_id), None)
            if target is None:
                raise DashboardError(ErrorCodes.RECORD_NOT_FOUND, record_id=record_id)

            siblings = sorted(
                (r for r in data["records"] if r["section"] == target["section"]),
                key=lambda r: (r.get("position", 0), int(r["id"])),
            )
            siblings.remove(target)
            to_index = max(0, min(to_index, len(siblings)))
            siblings.insert(to_index, target)
            for position, raw in enumerate(siblings):
                raw["position"] = position
            self._save(data)

        return [Record.from_dict(r) for r in siblings]
