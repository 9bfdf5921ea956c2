"""
대시보드 프로세스 로깅 설정

규칙:
- 모듈은 logging.getLogger(__name__)으로 로깅
- setup_logging()은 애플리케이션 시작 시 한 번만 실행
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"

# 요청/decode마다 INFO 로그를 남기는 라이브러리
_NOISY_LOGGERS = ("PIL", "multipart", "python_multipart")


def setup_logging(level: str | int = "INFO") -> None:
    """
    root logger 설정.

    Args:
        level: 로그 레벨 이름 또는 숫자
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        stream=sys.stdout,
    )
    logging.getLogger().setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
