"""
아카이빙 및 보관 정책

코스별 익스포트 파일의 zip 통합과 아카이브/로그 보관 개수 관리를 담당합니다.
"""

from app.archiving.archiver import BackupArchiver

from app.archiving.retention_manager import (
    ARCHIVE_PATTERN,
    LOG_PATTERN,
    ArtifactPattern,
    RetentionManager,
    scan_files,
)

__all__ = [
    # 통합 압축
    'BackupArchiver',

    # 보관 정책
    'ARCHIVE_PATTERN',
    'LOG_PATTERN',
    'ArtifactPattern',
    'RetentionManager',
    'scan_files',
]
