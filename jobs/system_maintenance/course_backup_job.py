"""
코스 백업 배치 작업

활성 코스마다 익스포트 파일을 만들고, 이전 실행이 남긴 파일을 하나의 zip으로
묶은 뒤, 아카이브와 로그 파일의 보관 개수를 유지합니다.

실행 순서:
    1. 로그 보관 정책 적용
    2. 백업 디렉토리 준비 (실패 시 실행 중단)
    3. 남은 익스포트 파일 통합 및 아카이브 보관 정책 적용
    4. 코스별 익스포트 (한 코스의 실패가 다른 코스를 막지 않음)
    5. 결과 요약
"""

import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from app.archiving.archiver import BackupArchiver
from app.archiving.retention_manager import RetentionManager
from app.core.base_job import BaseJob, JobConfig, JobResult
from app.core.error_handling import (
    BackupSystemError,
    ConfigurationError,
    DirectoryError,
    ErrorCodes,
)
from app.core.logger import RunLog
from app.services.candidate_source import (
    Candidate,
    CandidateSource,
    DatabaseCandidateSource,
)
from app.services.export_driver import (
    ExportDriver,
    ExportOutcome,
    Failed,
    SkippedMissingData,
    Success,
)
from app.services.exporter import CommandExporter, Exporter
from config.constants import (
    DATE_FORMATS,
    WARNING_REASON_MAX_LENGTH,
    ExitStatus,
    JobStatus,
    JobType,
)
from config.settings import BackupConfig, get_backup_config


@dataclass
class RunContext:
    """한 번의 실행 동안 고정되는 값"""

    run_timestamp: str
    backup_dir: Path
    log_file: Path


def default_job_config() -> JobConfig:
    return JobConfig(
        job_name="course_backup",
        job_type=JobType.COURSE_BACKUP,
    )


class CourseBackupJob(BaseJob):
    """코스 백업 배치 작업"""

    def __init__(
        self,
        config: Optional[JobConfig] = None,
        backup_dir: Optional[str] = None,
        course_code: Optional[str] = None,
        candidate_source: Optional[CandidateSource] = None,
        exporter: Optional[Exporter] = None,
        backup_config: Optional[BackupConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__(config or default_job_config())
        self.backup_config = backup_config or get_backup_config()
        self.course_code = course_code
        self.clock = clock
        self._candidate_source = candidate_source
        self._exporter = exporter

        started_at = self.clock()
        self.run_log = RunLog(self.backup_config.log_dir, started_at=started_at)
        self.run_context = RunContext(
            run_timestamp=started_at.strftime(DATE_FORMATS["file_datetime"]),
            backup_dir=Path(backup_dir or self.backup_config.backup_dir),
            log_file=self.run_log.log_file,
        )

        self.archiver = BackupArchiver(
            export_extension=self.backup_config.export_extension, run_log=self.run_log
        )
        self.retention = RetentionManager(
            run_log=self.run_log,
            archive_retention=self.backup_config.archive_retention,
            log_retention=self.backup_config.log_retention,
            archiver=self.archiver,
        )
        self._driver: Optional[ExportDriver] = None

    @property
    def candidate_source(self) -> CandidateSource:
        if self._candidate_source is None:
            self._candidate_source = DatabaseCandidateSource()
        return self._candidate_source

    @property
    def driver(self) -> ExportDriver:
        """실행 동안 유지되는 드라이버 (환경 초기화 여부를 보관)"""
        if self._driver is None:
            if self._exporter is None:
                self._exporter = CommandExporter()
            self._driver = ExportDriver(
                self._exporter,
                run_log=self.run_log,
                export_extension=self.backup_config.export_extension,
            )
        return self._driver

    def _now(self) -> str:
        return self.clock().strftime(DATE_FORMATS["log_datetime"])

    def pre_execute(self) -> None:
        """로그 정리 후 백업 디렉토리 준비"""
        self.run_log.log(f"=== Backup started at {self._now()} ===")

        # 현재 실행 로그를 포함하여 보관 개수 유지
        self._housekeeping(
            "log retention", self.retention.prune_logs, self.run_log.log_dir
        )

        try:
            self._prepare_backup_dir(self.run_context.backup_dir)
        except DirectoryError as e:
            self.logger.error(
                f"{e.message}. 권한을 확인하거나 --backup-dir 로 다른 디렉토리를 지정하세요"
            )
            self.run_log.error(e.message)
            raise

        self.run_log.log(f"Using backup directory: {self.run_context.backup_dir}")

    def _prepare_backup_dir(self, backup_dir: Path) -> None:
        """백업 디렉토리 생성 및 쓰기 권한 확인"""
        if not backup_dir.is_dir():
            try:
                backup_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryError(
                    f"Failed to create backup directory: {backup_dir}",
                    path=str(backup_dir),
                    cause=e,
                ) from e

        if not os.access(backup_dir, os.W_OK):
            raise DirectoryError(
                f"Backup directory is not writable: {backup_dir}. "
                f"Please check permissions.",
                path=str(backup_dir),
                error_code=ErrorCodes.DIRECTORY_NOT_WRITABLE,
            )

    def execute(self) -> JobResult:
        """코스 백업 실행"""
        result = JobResult(
            job_name=self.config.job_name,
            job_type=self.config.job_type,
            status=JobStatus.RUNNING,
            start_time=datetime.now(),
        )
        backup_dir = self.run_context.backup_dir

        # 이전 실행이 남긴 익스포트 파일 정리
        self._housekeeping(
            "archive retention",
            self.retention.consolidate_and_prune,
            backup_dir,
            self.clock(),
        )

        candidates = self._load_candidates()
        if self.course_code:
            candidates = [c for c in candidates if c.code == self.course_code]

        active = [c for c in candidates if c.active]
        self.run_log.log(
            f"Found {len(active)} active courses to backup "
            f"(out of {len(candidates)} total)"
        )

        driver_error = self._prepare_driver() if active else None
        success_count = 0
        fail_count = 0
        skipped_count = 0

        for candidate in active:
            if driver_error is not None:
                outcome = Failed(
                    code=candidate.code, reason=driver_error.message, error=driver_error
                )
            else:
                outcome = self.driver.export_one(
                    candidate, backup_dir, self.run_context.run_timestamp
                )
            self._record_outcome(outcome)

            if outcome.is_success:
                success_count += 1
            else:
                # 원본 누락으로 건너뛴 코스도 실패 건수에 포함
                fail_count += 1
                if isinstance(outcome, SkippedMissingData):
                    skipped_count += 1

        self.run_log.log(
            f"Backup completed - Success: {success_count}, Failed: {fail_count} "
            f"(skipped for missing files: {skipped_count})"
        )
        self.run_log.log(f"=== Backup finished at {self._now()} ===")
        self.run_log.log(f"Log file: {self.run_context.log_file}")

        result.processed_records = success_count
        result.metadata = {
            "total_courses": len(candidates),
            "active_courses": len(active),
            "success_count": success_count,
            "fail_count": fail_count,
            "skipped_count": skipped_count,
            "backup_directory": str(backup_dir),
            "log_file": str(self.run_context.log_file),
        }
        return result

    def _housekeeping(self, step: str, func: Callable, *args) -> None:
        """정리 작업 실행 (실패해도 나머지 작업은 계속)"""
        try:
            func(*args)
        except Exception as e:
            self.logger.warning(f"정리 작업 실패 [{step}]: {e}")
            self.run_log.warning(f"Housekeeping step failed ({step}): {e}")

    def _prepare_driver(self) -> Optional[BackupSystemError]:
        """익스포트 드라이버 준비 (익스포터를 만들 수 없으면 그 오류를 반환)"""
        try:
            self.driver
        except Exception as e:
            error = (
                e
                if isinstance(e, BackupSystemError)
                else ConfigurationError(str(e), config_key="EXPORT_COMMAND", cause=e)
            )
            self.logger.error(f"익스포터 준비 실패: {error.message}")
            self.run_log.error(f"Exporter is not available: {error.message}")
            return error
        return None

    def _load_candidates(self) -> List[Candidate]:
        """코스 목록 조회 (실패 시 빈 목록으로 진행)"""
        try:
            return self.candidate_source.list_candidates()
        except Exception as e:
            self.logger.error(f"코스 목록 조회 실패: {e}")
            self.run_log.error(f"Failed to list courses: {e}")
            return []

    def _record_outcome(self, outcome: ExportOutcome) -> None:
        """코스별 결과를 콘솔과 실행 로그에 기록"""
        if isinstance(outcome, Success):
            message = f"Backup created for course: {outcome.code}"
            self.logger.info(message)
            self.run_log.success(message)
        elif isinstance(outcome, SkippedMissingData):
            message = (
                f"Skipped course {outcome.code} (missing files): "
                f"{outcome.reason[:WARNING_REASON_MAX_LENGTH]}..."
            )
            self.logger.warning(message)
            self.run_log.warning(message)
            self.run_log.log(f"FULL ERROR: {outcome.reason}")
        else:
            message = f"Failed to backup course {outcome.code}: {outcome.reason}"
            error_id = outcome.error.context.error_id if outcome.error else "-"
            self.logger.error(f"{message} [{error_id}]")
            self.run_log.error(message)

    def post_execute(self, result: JobResult) -> None:
        """실행 후 처리"""
        super().post_execute(result)

        stats = self._get_backup_statistics()
        if stats:
            self.logger.info(
                f"백업 디렉토리 통계: 아카이브 {stats['archives']}개, "
                f"코스 파일 {stats['export_files']}개, {stats['total_size_mb']:.1f}MB"
            )

        try:
            disk_usage = shutil.disk_usage(self.run_context.backup_dir)
            used_percent = (disk_usage.used / disk_usage.total) * 100
            if used_percent > 90:
                self.logger.warning(f"디스크 사용률 높음: {used_percent:.1f}%")
        except OSError as e:
            self.logger.warning(f"디스크 사용량 확인 실패: {e}")

    def _get_backup_statistics(self) -> Dict:
        """백업 디렉토리 통계 정보 조회"""
        try:
            backup_dir = self.run_context.backup_dir
            archives = [
                f for f in backup_dir.glob("backup_*.zip") if f.is_file()
            ]
            export_files = self.archiver.find_export_files(backup_dir)
            total_size = sum(f.stat().st_size for f in archives + export_files)
            return {
                "archives": len(archives),
                "export_files": len(export_files),
                "total_size_mb": round(total_size / (1024 * 1024), 2),
            }
        except OSError as e:
            self.logger.warning(f"백업 통계 조회 실패: {e}")
            return {}

    def run(self) -> JobResult:
        try:
            return super().run()
        finally:
            self.run_log.close()


def run_course_backup(
    backup_dir: Optional[str] = None,
    course_code: Optional[str] = None,
    candidate_source: Optional[CandidateSource] = None,
    exporter: Optional[Exporter] = None,
    backup_config: Optional[BackupConfig] = None,
) -> ExitStatus:
    """
    코스 백업 실행 함수

    백업 디렉토리를 준비할 수 없을 때만 FAILURE를 반환합니다.
    그 밖의 예기치 못한 오류는 기록하고 SUCCESS로 종료합니다.
    """
    job = CourseBackupJob(
        backup_dir=backup_dir,
        course_code=course_code,
        candidate_source=candidate_source,
        exporter=exporter,
        backup_config=backup_config,
    )
    result = job.run()
    if isinstance(result.error, DirectoryError):
        return ExitStatus.FAILURE
    if result.is_failure:
        job.logger.error(f"백업 작업 중 예기치 못한 오류: {result.error_message}")
    return ExitStatus.SUCCESS
