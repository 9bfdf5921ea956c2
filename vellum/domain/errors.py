"""
대시보드 에러 정의

규칙:
- Silent failure 금지: 깨진 업로드 하나가 요청 전체를 실패시킴
- 모르는 directive params는 에러가 아님 (버려짐)
- 모든 에러는 code + 로그/응답용 context를 가짐
- 모든 ErrorCodes 상수는 STATUS_BY_CODE에 HTTP status가 있음
"""

from typing import Any


class DashboardError(Exception):
    """
    대시보드 요청을 완료할 수 없을 때 발생.

    사용처:
    - 없는 섹션/레코드/업로드
    - 수집 중 이미지 decode/encode 실패
    - 레코드 저장소 락 타임아웃, 손상된 데이터
    - 잘못된 설정

    사용법:
        raise DashboardError("IMAGE_DECODE_FAILED", filename="photo.jpg", cause=e)
    """

    def __init__(self, code: str, **context: Any) -> None:
        self.code = code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    def to_dict(self) -> dict[str, Any]:
        """로그와 JSON 응답용."""
        return {
            "code": self.code,
            **{k: str(v) for k, v in self.context.items()},
        }


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수. 추가 시 STATUS_BY_CODE에도 HTTP status 등록."""

    # === Lookup ===
    SECTION_NOT_FOUND = "SECTION_NOT_FOUND"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    UPLOAD_NOT_FOUND = "UPLOAD_NOT_FOUND"

    # === Ingestion ===
    IMAGE_DECODE_FAILED = "IMAGE_DECODE_FAILED"
    IMAGE_WRITE_FAILED = "IMAGE_WRITE_FAILED"

    # === Store ===
    STORE_LOCK_TIMEOUT = "STORE_LOCK_TIMEOUT"
    STORE_CORRUPT = "STORE_CORRUPT"

    # === Config ===
    CONFIG_INVALID = "CONFIG_INVALID"


STATUS_BY_CODE: dict[str, int] = {
    ErrorCodes.SECTION_NOT_FOUND: 404,
    ErrorCodes.RECORD_NOT_FOUND: 404,
    ErrorCodes.UPLOAD_NOT_FOUND: 404,
    ErrorCodes.IMAGE_DECODE_FAILED: 422,
    ErrorCodes.IMAGE_WRITE_FAILED: 500,
    ErrorCodes.STORE_LOCK_TIMEOUT: 503,
    ErrorCodes.STORE_CORRUPT: 500,
    ErrorCodes.CONFIG_INVALID: 500,
}


def status_for(error: DashboardError) -> int:
    """에러 코드의 HTTP status (등록되지 않은 코드는 500)."""
    return STATUS_BY_CODE.get(error.code, 500)
