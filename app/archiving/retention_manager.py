"""
보관 정책 관리자

디렉토리를 매번 새로 스캔하여 최근 수정된 N개의 산출물만 남기고
나머지를 삭제합니다. 메모리에 산출물 목록을 유지하지 않습니다.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

from app.archiving.archiver import BackupArchiver
from app.core.error_handling import ArchiveError, ErrorCodes
from app.core.logger import RunLog
from config.constants import (
    ARCHIVE_EXTENSION,
    ARTIFACT_PREFIX,
    LOG_EXTENSION,
    RETENTION_LIMITS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactPattern:
    """접두어와 확장자로 정의되는 산출물 이름 규칙"""

    prefix: str
    extension: str

    def matches(self, path: Path) -> bool:
        return path.name.startswith(self.prefix) and path.suffix == f".{self.extension}"


ARCHIVE_PATTERN = ArtifactPattern(ARTIFACT_PREFIX, ARCHIVE_EXTENSION)
LOG_PATTERN = ArtifactPattern(ARTIFACT_PREFIX, LOG_EXTENSION)


def scan_files(directory: Path, predicate: Callable[[Path], bool]) -> List[Path]:
    """디렉토리 바로 아래에서 조건에 맞는 일반 파일 목록 (비재귀)"""
    if not directory.is_dir():
        return []
    return [entry for entry in directory.iterdir() if entry.is_file() and predicate(entry)]


class RetentionManager:
    """백업 아카이브와 로그 파일의 보관 개수 관리"""

    def __init__(
        self,
        run_log: Optional[RunLog] = None,
        archive_retention: int = RETENTION_LIMITS["archives"],
        log_retention: int = RETENTION_LIMITS["logs"],
        archiver: Optional[BackupArchiver] = None,
    ):
        self.run_log = run_log
        self.archive_retention = archive_retention
        self.log_retention = log_retention
        self.archiver = archiver

    def prune(
        self,
        directory: Union[str, Path],
        name_predicate: Callable[[Path], bool],
        keep_count: int,
        label: str = "file",
    ) -> List[Path]:
        """
        최근 수정된 keep_count개만 남기고 나머지 삭제

        삭제 실패는 기록만 하고 다음 파일로 진행합니다.

        Returns:
            List[Path]: 실제로 삭제된 파일 목록
        """
        files = []
        for path in scan_files(Path(directory), name_predicate):
            try:
                files.append((path.stat().st_mtime, path))
            except OSError:
                # 스캔과 stat 사이에 사라진 파일
                continue

        files.sort(key=lambda item: item[0], reverse=True)
        deleted = []

        for _, path in files[keep_count:]:
            try:
                path.unlink()
                deleted.append(path)
                self._log(f"Deleted old {label}: {path.name}")
            except OSError as e:
                error = ArchiveError(
                    f"Failed to delete old {label}: {path.name}",
                    path=str(path),
                    error_code=ErrorCodes.ARCHIVE_DELETE_FAILED,
                    cause=e,
                )
                self._warn(error.message)

        if deleted:
            logger.info(f"보관 정책 적용: {directory} 에서 {len(deleted)}개 삭제")
        return deleted

    def prune_logs(self, log_dir: Union[str, Path]) -> List[Path]:
        """백업 로그 보관 정책 적용 (현재 실행 로그 포함)"""
        return self.prune(log_dir, LOG_PATTERN.matches, self.log_retention, "log file")

    def prune_archives(self, backup_dir: Union[str, Path]) -> List[Path]:
        """백업 아카이브 보관 정책 적용"""
        return self.prune(
            backup_dir, ARCHIVE_PATTERN.matches, self.archive_retention, "backup archive"
        )

    def consolidate_and_prune(
        self, backup_dir: Union[str, Path], now: Optional[datetime] = None
    ) -> List[Path]:
        """남아 있는 코스별 백업 파일을 묶은 뒤 아카이브 보관 정책 적용"""
        if self.archiver is not None:
            self.archiver.consolidate(backup_dir, now or datetime.now())
        return self.prune_archives(backup_dir)

    def _log(self, message: str) -> None:
        if self.run_log is not None:
            self.run_log.log(message)

    def _warn(self, message: str) -> None:
        logger.warning(message)
        if self.run_log is not None:
            self.run_log.warning(message)
