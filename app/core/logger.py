"""
로깅 설정 및 관리 모듈

콘솔 로깅(운영자 출력)과 실행 단위 백업 로그 파일을 관리합니다.
"""

import fcntl
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from config.constants import ARTIFACT_PREFIX, DATE_FORMATS, LOG_EXTENSION
from config.settings import get_logging_config

RUN_LOGGER_NAME = "backup.run"


class JobLogger:
    """배치 작업용 콘솔 로거 클래스"""

    def __init__(self):
        self.config = get_logging_config()
        self._setup_logging()

    def _setup_logging(self) -> None:
        """로깅 설정"""
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, self.config.level))

        # 이미 설정된 콘솔 핸들러가 있으면 재사용
        for handler in root_logger.handlers:
            if getattr(handler, "_job_console", False):
                return

        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, self.config.level))
        console_handler.setFormatter(logging.Formatter(self.config.format))
        console_handler._job_console = True
        root_logger.addHandler(console_handler)

    def get_logger(self, name: str) -> logging.Logger:
        """특정 이름의 로거 반환"""
        return logging.getLogger(name)


class LockedAppendFileHandler(logging.FileHandler):
    """레코드마다 배타적 잠금을 걸고 추가 기록하는 파일 핸들러"""

    def __init__(self, filename: Union[str, Path], encoding: str = "utf-8"):
        super().__init__(filename, mode="a", encoding=encoding, delay=True)

    def emit(self, record: logging.LogRecord) -> None:
        if self.stream is None:
            self.stream = self._open()
        fcntl.flock(self.stream.fileno(), fcntl.LOCK_EX)
        try:
            super().emit(record)
        finally:
            fcntl.flock(self.stream.fileno(), fcntl.LOCK_UN)


class RunLog:
    """
    실행 단위 백업 로그

    한 번의 실행 동안 경로가 고정된 로그 파일에
    ``[YYYY-MM-DD HH:MM:SS] message`` 형식으로 한 줄씩 추가합니다.
    """

    def __init__(self, log_dir: Union[str, Path], started_at: Optional[datetime] = None):
        self.log_dir = Path(log_dir)
        self.started_at = started_at or datetime.now()
        self.log_file = self.log_dir / (
            f"{ARTIFACT_PREFIX}"
            f"{self.started_at.strftime(DATE_FORMATS['file_datetime'])}"
            f".{LOG_EXTENSION}"
        )
        self._logger = self._build_logger()

    def _build_logger(self) -> logging.Logger:
        """실행 로그 전용 로거 생성 (루트 로거로 전파하지 않음)"""
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            # 로그 디렉토리를 만들 수 없어도 첫 기록 시점까지 진행
            pass

        # 전역 로거 목록에 등록하지 않는 실행 전용 로거
        logger = logging.Logger(RUN_LOGGER_NAME, level=logging.DEBUG)
        logger.propagate = False

        handler = LockedAppendFileHandler(self.log_file)
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(message)s", datefmt=DATE_FORMATS["log_datetime"]
            )
        )
        logger.addHandler(handler)
        self._handler = handler
        return logger

    def log(self, message: str) -> None:
        """로그 한 줄 기록"""
        try:
            self._logger.info(message)
        except OSError:
            logging.getLogger(__name__).warning(
                f"백업 로그 기록 실패 [{self.log_file}]: {message}"
            )

    def warning(self, message: str) -> None:
        self.log(f"WARNING: {message}")

    def error(self, message: str) -> None:
        self.log(f"ERROR: {message}")

    def success(self, message: str) -> None:
        self.log(f"SUCCESS: {message}")

    def close(self) -> None:
        """파일 핸들러 정리"""
        self._logger.removeHandler(self._handler)
        self._handler.close()


# 전역 로거 인스턴스
_logger_instance = None


def get_logger_instance() -> JobLogger:
    """전역 로거 인스턴스 반환"""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = JobLogger()
    return _logger_instance


def get_logger(name: str) -> logging.Logger:
    """특정 이름의 로거 반환 (편의 함수)"""
    return get_logger_instance().get_logger(name)
