"""
애플리케이션 설정 관리 모듈

환경 변수와 설정 값들을 중앙에서 관리합니다.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

from config.constants import ARCHIVE_EXTENSION, LOG_EXTENSION

# 환경 변수 로드
load_dotenv()


@dataclass
class BackupConfig:
    """백업 설정"""

    backup_dir: str = "/var/backups/chamilo"
    log_dir: str = "/var/www/chamilo/var/log"
    archive_retention: int = 30
    log_retention: int = 31
    export_extension: str = "mbz"
    schedule_time: str = "02:30"
    timezone: str = "Europe/Paris"

    def __post_init__(self):
        # 통합 zip과 실행 로그가 코스 파일로 다시 수집되지 않도록 제한
        self.export_extension = self.export_extension.lstrip(".").lower()
        if self.export_extension in (ARCHIVE_EXTENSION, LOG_EXTENSION):
            raise ValueError(
                f"코스 익스포트 확장자로 사용할 수 없음: {self.export_extension}"
            )


@dataclass
class ExporterConfig:
    """외부 익스포터 설정"""

    command: str = ""
    working_dir: str = ""
    bootstrap_command: str = ""
    temp_dir: str = "/tmp"
    timeout: Optional[int] = None  # None이면 제한 없음


@dataclass
class DatabaseConfig:
    """코스 목록 조회용 데이터베이스 설정"""

    url: str = ""
    course_table: str = "course"
    code_column: str = "code"
    active_column: str = "visibility"
    inactive_values: Tuple[str, ...] = ("4",)  # 4 = 숨김


@dataclass
class LoggingConfig:
    """로깅 설정"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_backup_config() -> BackupConfig:
    """백업 설정 조회"""
    return BackupConfig(
        backup_dir=os.getenv("BACKUP_DIR", "/var/backups/chamilo"),
        log_dir=os.getenv("BACKUP_LOG_DIR", "/var/www/chamilo/var/log"),
        archive_retention=int(os.getenv("BACKUP_ARCHIVE_RETENTION", "30")),
        log_retention=int(os.getenv("BACKUP_LOG_RETENTION", "31")),
        export_extension=os.getenv("BACKUP_EXPORT_EXTENSION", "mbz").lstrip("."),
        schedule_time=os.getenv("BACKUP_SCHEDULE_TIME", "02:30"),
        timezone=os.getenv("BACKUP_TIMEZONE", "Europe/Paris"),
    )


def get_exporter_config() -> ExporterConfig:
    """익스포터 설정 조회"""
    timeout = os.getenv("EXPORT_TIMEOUT", "")
    return ExporterConfig(
        command=os.getenv("EXPORT_COMMAND", ""),
        working_dir=os.getenv("EXPORT_WORKING_DIR", ""),
        bootstrap_command=os.getenv("EXPORT_BOOTSTRAP_COMMAND", ""),
        temp_dir=os.getenv("EXPORT_TEMP_DIR", "/tmp"),
        timeout=int(timeout) if timeout else None,
    )


def get_database_config() -> DatabaseConfig:
    """데이터베이스 설정 조회"""
    return DatabaseConfig(
        url=os.getenv("DATABASE_URL", ""),
        course_table=os.getenv("COURSE_TABLE", "course"),
        code_column=os.getenv("COURSE_CODE_COLUMN", "code"),
        active_column=os.getenv("COURSE_ACTIVE_COLUMN", "visibility"),
        inactive_values=tuple(
            value.strip()
            for value in os.getenv("COURSE_INACTIVE_VALUES", "4").split(",")
            if value.strip()
        ),
    )


def get_logging_config() -> LoggingConfig:
    """로깅 설정 조회"""
    return LoggingConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format=os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ),
    )

