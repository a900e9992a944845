"""
통합 오류 처리 프레임워크

백업 배치 전체에서 일관된 오류 분류와 로깅을 제공합니다.
실행 전체를 중단시키는 오류는 DirectoryError 하나뿐이며,
나머지는 코스 단위 또는 정리 작업 단위로 격리됩니다.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, Iterable
from dataclasses import dataclass, field

from config.constants import MISSING_DATA_MARKERS


class ErrorSeverity(Enum):
    """오류 심각도 수준"""

    CRITICAL = "critical"  # 실행 중단 수준
    HIGH = "high"  # 코스 백업 실패
    MEDIUM = "medium"  # 정리 작업 실패
    LOW = "low"  # 경고성 문제
    INFO = "info"  # 정보성 메시지


class ErrorCategory(Enum):
    """오류 카테고리"""

    DIRECTORY_ERROR = "directory"  # 백업 디렉토리 관련
    LOOKUP_ERROR = "lookup"  # 코스 컨텍스트 조회 관련
    MISSING_DATA_ERROR = "missing_data"  # 원본 데이터 누락
    EXPORT_ERROR = "export"  # 익스포터 실행 관련
    ARCHIVE_ERROR = "archive"  # 압축/보관 관련
    CONFIGURATION_ERROR = "config"  # 설정 관련
    SYSTEM_ERROR = "system"  # 시스템 관련


@dataclass
class ErrorContext:
    """오류 컨텍스트 정보"""

    error_id: str = ""
    operation: str = ""
    course_code: str = ""
    path: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    technical_message: str = ""


class BackupSystemError(Exception):
    """프로젝트 기본 예외 클래스"""

    def __init__(
        self,
        message: str,
        error_code: str = "CB_UNKNOWN",
        category: ErrorCategory = ErrorCategory.SYSTEM_ERROR,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.cause = cause

        # 고유 오류 ID 생성
        if not self.context.error_id:
            self.context.error_id = self._generate_error_id()

    def _generate_error_id(self) -> str:
        """고유 오류 ID 생성"""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{self.error_code}_{timestamp}_{id(self) % 10000:04d}"


# ========== 특화된 예외 클래스들 ==========


class DirectoryError(BackupSystemError):
    """백업 디렉토리를 만들 수 없거나 쓸 수 없음 (실행 중단)"""

    def __init__(self, message: str, path: str = "", **kwargs):
        super().__init__(
            message,
            error_code=kwargs.pop("error_code", ErrorCodes.DIRECTORY_CREATE_FAILED),
            category=ErrorCategory.DIRECTORY_ERROR,
            severity=ErrorSeverity.CRITICAL,
            **kwargs,
        )
        self.path = path
        self.context.path = path


class CandidateLookupError(BackupSystemError):
    """코스의 익스포터 컨텍스트를 확인할 수 없음"""

    def __init__(self, message: str, course_code: str = "", **kwargs):
        super().__init__(
            message,
            error_code=ErrorCodes.CANDIDATE_LOOKUP_FAILED,
            category=ErrorCategory.LOOKUP_ERROR,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.course_code = course_code
        self.context.course_code = course_code


class MissingDataError(BackupSystemError):
    """원본 콘텐츠 누락 또는 손상 (경고로 격하)"""

    def __init__(self, message: str, course_code: str = "", **kwargs):
        super().__init__(
            message,
            error_code=ErrorCodes.MISSING_SOURCE_DATA,
            category=ErrorCategory.MISSING_DATA_ERROR,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.course_code = course_code
        self.context.course_code = course_code


class ExportFailure(BackupSystemError):
    """익스포터 실행 또는 결과 파일 이동 실패"""

    def __init__(self, message: str, course_code: str = "", **kwargs):
        super().__init__(
            message,
            error_code=kwargs.pop("error_code", ErrorCodes.EXPORT_FAILED),
            category=ErrorCategory.EXPORT_ERROR,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.course_code = course_code
        self.context.course_code = course_code


class ArchiveError(BackupSystemError):
    """아카이브 생성 또는 삭제 실패 (실행은 계속)"""

    def __init__(self, message: str, path: str = "", **kwargs):
        super().__init__(
            message,
            error_code=kwargs.pop("error_code", ErrorCodes.ARCHIVE_CREATE_FAILED),
            category=ErrorCategory.ARCHIVE_ERROR,
            severity=ErrorSeverity.MEDIUM,
            **kwargs,
        )
        self.path = path
        self.context.path = path


class ConfigurationError(BackupSystemError):
    """설정 관련 오류"""

    def __init__(self, message: str, config_key: str = "", **kwargs):
        super().__init__(
            message,
            error_code="CB_CONFIG_ERROR",
            category=ErrorCategory.CONFIGURATION_ERROR,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.config_key = config_key
        self.context.metadata.update({"config_key": config_key})


# ========== 오류 코드 상수 ==========


class ErrorCodes:
    """표준 오류 코드"""

    # 디렉토리 관련
    DIRECTORY_CREATE_FAILED = "CB_DIR_001"
    DIRECTORY_NOT_WRITABLE = "CB_DIR_002"

    # 코스 처리 관련
    CANDIDATE_LOOKUP_FAILED = "CB_EXP_001"
    MISSING_SOURCE_DATA = "CB_EXP_002"
    EXPORT_FAILED = "CB_EXP_003"
    EXPORT_OUTPUT_MISSING = "CB_EXP_004"
    EXPORT_COPY_FAILED = "CB_EXP_005"

    # 아카이브 관련
    ARCHIVE_CREATE_FAILED = "CB_ARC_001"
    ARCHIVE_DELETE_FAILED = "CB_ARC_002"


# ========== 편의 함수들 ==========


def is_missing_data_message(
    message: str, markers: Iterable[str] = MISSING_DATA_MARKERS
) -> bool:
    """익스포터 오류 메시지가 원본 데이터 누락 계열인지 확인"""
    return any(marker in message for marker in markers)


def classify_export_error(e: Exception, course_code: str = "") -> BackupSystemError:
    """익스포터 실행 중 발생한 예외를 분류 체계로 변환"""
    if isinstance(e, (MissingDataError, CandidateLookupError)):
        return e

    message = e.message if isinstance(e, BackupSystemError) else str(e)
    context = ErrorContext(
        operation="export", course_code=course_code, technical_message=message
    )

    # 익스포터가 보고한 실패라도 메시지가 누락 계열이면 경고로 격하
    if is_missing_data_message(message):
        return MissingDataError(
            message, course_code=course_code, context=context, cause=e
        )
    if isinstance(e, ExportFailure):
        return e
    return ExportFailure(message, course_code=course_code, context=context, cause=e)
