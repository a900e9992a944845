"""
백업 아카이버

백업 디렉토리에 남아 있는 코스별 익스포트 파일을 하나의 zip 묶음으로
모은 뒤 원본을 삭제합니다.
"""

import logging
import zipfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from app.core.error_handling import ArchiveError, ErrorCodes
from app.core.logger import RunLog
from config.constants import ARCHIVE_EXTENSION, ARTIFACT_PREFIX, DATE_FORMATS

logger = logging.getLogger(__name__)


class BackupArchiver:
    """코스별 익스포트 파일 통합 압축기"""

    def __init__(self, export_extension: str = "mbz", run_log: Optional[RunLog] = None):
        self.export_extension = export_extension.lstrip(".")
        self.run_log = run_log

    def find_export_files(self, backup_dir: Union[str, Path]) -> List[Path]:
        """디렉토리 바로 아래의 코스별 익스포트 파일 목록"""
        directory = Path(backup_dir)
        if not directory.is_dir():
            return []
        return sorted(
            entry
            for entry in directory.iterdir()
            if entry.is_file() and entry.suffix == f".{self.export_extension}"
        )

    def bundle_path(self, backup_dir: Union[str, Path], now: datetime) -> Path:
        """통합 아카이브 경로"""
        stamp = now.strftime(DATE_FORMATS["file_datetime"])
        return Path(backup_dir) / f"{ARTIFACT_PREFIX}{stamp}.{ARCHIVE_EXTENSION}"

    def consolidate(
        self, backup_dir: Union[str, Path], now: Optional[datetime] = None
    ) -> Optional[Path]:
        """
        익스포트 파일을 하나의 아카이브로 통합

        이전 실행이 남긴 파일까지 포함하여 현재 존재하는 모든 익스포트 파일을
        대상으로 합니다. 아카이브 생성에 실패하면 원본은 그대로 둡니다.

        Returns:
            Optional[Path]: 생성된 아카이브 경로 (대상이 없거나 실패하면 None)
        """
        export_files = self.find_export_files(backup_dir)
        if not export_files:
            return None

        bundle = self.bundle_path(backup_dir, now or datetime.now())
        self._log(
            f"Archiving {len(export_files)} backup file(s) into {bundle.name}..."
        )

        try:
            self._write_bundle(bundle, export_files)
        except ArchiveError as e:
            logger.warning(f"아카이브 생성 실패: {e.message}")
            self._log(f"WARNING: {e.message}")
            return None

        for export_file in export_files:
            try:
                export_file.unlink()
                self._log(f"Deleted: {export_file.name}")
            except OSError as e:
                logger.warning(f"백업 파일 삭제 실패 [{export_file.name}]: {e}")
                self._log(f"WARNING: Failed to delete: {export_file.name}")

        logger.info(f"백업 파일 {len(export_files)}개 통합 완료: {bundle.name}")
        return bundle

    def _write_bundle(self, bundle: Path, export_files: List[Path]) -> None:
        """zip 묶음 작성 (실패 시 부분 파일 제거)"""
        if bundle.exists():
            raise ArchiveError(
                f"Failed to create zip archive: {bundle.name} (already exists)",
                path=str(bundle),
            )

        try:
            with zipfile.ZipFile(bundle, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for export_file in export_files:
                    zf.write(export_file, arcname=export_file.name)
        except (OSError, zipfile.BadZipFile) as e:
            try:
                bundle.unlink()
            except FileNotFoundError:
                pass
            raise ArchiveError(
                f"Failed to create zip archive: {bundle.name}",
                path=str(bundle),
                error_code=ErrorCodes.ARCHIVE_CREATE_FAILED,
                cause=e,
            ) from e

    def _log(self, message: str) -> None:
        if self.run_log is not None:
            self.run_log.log(message)
