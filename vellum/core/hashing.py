"""
해싱: artifact checksum과 content 변경 감지

규칙:
- Artifact checksum: 원본 파일 bytes의 MD5 (보안용이 아닌 이름 생성용)
- Content hash: 키 정렬 JSON 직렬화 → SHA-256
- 같은 입력 → 항상 같은 해시
"""

import hashlib
import json
from pathlib import Path
from typing import Any

ARTIFACT_HASH_ALGORITHM = "md5"


def compute_file_hash(file_path: Path, algorithm: str = ARTIFACT_HASH_ALGORITHM) -> str:
    """
    파일을 chunk 단위로 해싱.

    Args:
        file_path: 해싱할 파일
        algorithm: hashlib 알고리즘 이름 (기본: md5)

    Returns:
        hex digest
    """
    h = hashlib.new(algorithm)
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def compute_bytes_hash(data: bytes, algorithm: str = ARTIFACT_HASH_ALGORITHM) -> str:
    """메모리 버퍼 해싱 (compute_file_hash와 같은 digest)."""
    return hashlib.new(algorithm, data).hexdigest()


def compute_content_hash(content: dict[str, Any]) -> str:
    """
    레코드 content 매핑 해싱 (update 시 변경 감지).

    - 키 정렬: dict 순서는 무관
    - 리스트 순서는 유의미 (슬롯 순서도 content)
    - SHA-256

    Args:
        content: 레코드 content

    Returns:
        SHA-256 hex digest
    """
    serialized = json.dumps(content, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(serialized.encode()).hexdigest()
