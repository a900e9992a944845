"""
코스 단위 익스포트 드라이버

환경 초기화, 코스 컨텍스트 설정/해제, 익스포터 호출, 결과 분류,
백업 디렉토리로의 파일 이동을 담당합니다.
"""

import logging
import os
import shutil
import warnings
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from app.core.error_handling import (
    BackupSystemError,
    CandidateLookupError,
    ErrorCodes,
    ExportFailure,
    MissingDataError,
    classify_export_error,
)
from app.core.logger import RunLog
from app.services.candidate_source import Candidate
from app.services.exporter import ExportContext, Exporter, FatalExportWarning

logger = logging.getLogger(__name__)

FATAL_LEVELS = ("ERROR", "FATAL")


@dataclass
class ExportOutcome:
    """코스별 익스포트 결과"""

    code: str

    @property
    def is_success(self) -> bool:
        return False


@dataclass
class Success(ExportOutcome):
    archive_path: Optional[Path] = None

    @property
    def is_success(self) -> bool:
        return True


@dataclass
class SkippedMissingData(ExportOutcome):
    reason: str = ""
    error: Optional[BackupSystemError] = None


@dataclass
class Failed(ExportOutcome):
    reason: str = ""
    error: Optional[BackupSystemError] = None


@contextmanager
def working_directory(path: Optional[str]) -> Iterator[None]:
    """작업 디렉토리를 잠시 변경하고 항상 원래대로 복원"""
    if not path:
        yield
        return

    original_cwd = os.getcwd()
    os.chdir(path)
    try:
        yield
    finally:
        os.chdir(original_cwd)


class ExportDriver:
    """코스 하나를 백업 파일로 만드는 드라이버"""

    def __init__(
        self,
        exporter: Exporter,
        run_log: Optional[RunLog] = None,
        export_extension: str = "mbz",
    ):
        self.exporter = exporter
        self.run_log = run_log
        self.export_extension = export_extension.lstrip(".")
        self.current_context: Optional[ExportContext] = None
        self._bootstrapped = False

    @property
    def bootstrapped(self) -> bool:
        return self._bootstrapped

    def export_one(
        self, candidate: Candidate, backup_dir: Union[str, Path], run_timestamp: str
    ) -> ExportOutcome:
        """
        코스 하나 익스포트

        어떤 경로로 끝나든 코스 컨텍스트는 해제된 상태로 반환합니다.

        Returns:
            ExportOutcome: Success / SkippedMissingData / Failed
        """
        code = candidate.code

        try:
            self._ensure_bootstrapped()
            with self._candidate_scope(candidate) as context:
                with self._diagnostics(code):
                    exported = Path(self.exporter.export(context))
                archive_path = self._relocate(exported, code, backup_dir, run_timestamp)
        except Exception as e:
            error = classify_export_error(e, code)
            if isinstance(error, MissingDataError):
                return SkippedMissingData(code=code, reason=error.message, error=error)
            return Failed(code=code, reason=error.message, error=error)

        return Success(code=code, archive_path=archive_path)

    def export_filename(self, code: str, run_timestamp: str) -> str:
        return f"{code}_backup_{run_timestamp}.{self.export_extension}"

    def _ensure_bootstrapped(self) -> None:
        """익스포터 환경을 한 번만 초기화"""
        if self._bootstrapped:
            return

        with working_directory(self.exporter.working_dir):
            self.exporter.bootstrap()
        self._bootstrapped = True
        logger.debug("익스포터 환경 초기화 완료")

    @contextmanager
    def _candidate_scope(self, candidate: Candidate) -> Iterator[ExportContext]:
        """코스 컨텍스트 설정 및 해제"""
        info = self.exporter.resolve(candidate.code)
        if not info:
            raise CandidateLookupError(
                f"Could not get course info for: {candidate.code}",
                course_code=candidate.code,
            )

        context = ExportContext(
            code=candidate.code,
            info=info,
            report=lambda level, message: self._report(candidate.code, level, message),
        )
        self.current_context = context
        try:
            yield context
        finally:
            self.current_context = None
            self._release(context)

    def _release(self, context: ExportContext) -> None:
        """임시 경로 정리 (실패는 경고로만 기록)"""
        try:
            self.exporter.release(context)
        except Exception as e:
            logger.warning(f"익스포트 임시 경로 정리 실패 [{context.code}]: {e}")
            self._log(
                f"WARNING: Failed to release export scratch paths: {e} "
                f"(course: {context.code})"
            )

    @contextmanager
    def _diagnostics(self, code: str) -> Iterator[None]:
        """익스포터 실행 중 경고를 실행 로그로 돌리고, 치명적 진단만 실패로 승격"""

        def showwarning(message, category, filename, lineno, file=None, line=None):
            self._log(
                f"WARNING: [{category.__name__}] {message} "
                f"in {filename} on line {lineno} (course: {code})"
            )

        with warnings.catch_warnings():
            warnings.simplefilter("always")
            warnings.simplefilter("error", FatalExportWarning)
            warnings.showwarning = showwarning
            yield

    def _report(self, code: str, level: str, message: str) -> None:
        """익스포터가 보낸 진단 메시지 처리"""
        level = level.upper()
        if level in FATAL_LEVELS:
            raise ExportFailure(message, course_code=code)
        self._log(f"{level}: {message} (course: {code})")

    def _relocate(
        self, exported: Path, code: str, backup_dir: Union[str, Path], run_timestamp: str
    ) -> Path:
        """익스포트 결과를 백업 디렉토리로 복사한 뒤 원본 삭제"""
        if not exported.is_file():
            raise ExportFailure(
                f"Exporter did not create the expected .{self.export_extension} "
                f"file at: {exported}",
                course_code=code,
                error_code=ErrorCodes.EXPORT_OUTPUT_MISSING,
            )

        backup_path = Path(backup_dir) / self.export_filename(code, run_timestamp)
        try:
            shutil.copyfile(exported, backup_path)
        except OSError as e:
            backup_path.unlink(missing_ok=True)
            raise ExportFailure(
                f"Failed to copy .{self.export_extension} file to backup directory: {e}",
                course_code=code,
                error_code=ErrorCodes.EXPORT_COPY_FAILED,
                cause=e,
            ) from e

        try:
            exported.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"익스포트 원본 삭제 실패 [{exported}]: {e}")

        return backup_path

    def _log(self, message: str) -> None:
        if self.run_log is not None:
            self.run_log.log(message)
