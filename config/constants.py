"""
상수 정의 모듈

코스 백업 배치에서 사용하는 상수들을 정의합니다.
"""

from enum import Enum


class JobType(Enum):
    """배치 작업 타입"""

    COURSE_BACKUP = "course_backup"


class JobStatus(Enum):
    """작업 상태"""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ExitStatus(Enum):
    """프로세스 종료 상태"""

    SUCCESS = 0
    FAILURE = 1


# 날짜 형식
DATE_FORMATS = {
    "log_datetime": "%Y-%m-%d %H:%M:%S",
    "file_datetime": "%Y-%m-%d_%H-%M-%S",
}

# 백업 산출물 파일 규칙
ARTIFACT_PREFIX = "backup_"
ARCHIVE_EXTENSION = "zip"
LOG_EXTENSION = "log"

# 보관 개수
RETENTION_LIMITS = {
    "archives": 30,
    "logs": 31,
}

# 원본 데이터 누락으로 간주하는 익스포터 오류 메시지
MISSING_DATA_MARKERS = (
    "Source file not found",
    "Undefined array key",
    "ERROR source not found",
)

# 경고 로그에 남기는 오류 메시지 최대 길이
WARNING_REASON_MAX_LENGTH = 100
