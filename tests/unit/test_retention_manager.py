"""
보관 정책 관리자 단위 테스트
"""

import os
import tempfile
import time
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

from app.archiving import ARCHIVE_PATTERN, LOG_PATTERN, RetentionManager
from app.core.logger import RunLog


def make_file(directory: Path, name: str, mtime: float) -> Path:
    path = directory / name
    path.write_bytes(b"data")
    os.utime(path, (mtime, mtime))
    return path


class TestRetentionManager(unittest.TestCase):
    """RetentionManager 테스트"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.backup_dir = self.root / "backups"
        self.backup_dir.mkdir()
        self.run_log = RunLog(self.root / "logs", started_at=datetime(2024, 6, 1))
        self.manager = RetentionManager(run_log=self.run_log)
        self.base_time = time.time() - 100000

    def tearDown(self):
        self.run_log.close()
        self._tmp.cleanup()

    def _make_bundles(self, count: int, offset: int = 0):
        return [
            make_file(
                self.backup_dir,
                f"backup_2024-01-01_00-00-{i + offset:03d}.zip",
                self.base_time + i + offset,
            )
            for i in range(count)
        ]

    def test_keeps_30_newest_archives(self):
        """35개 아카이브 중 최신 30개만 남음"""
        bundles = self._make_bundles(35)

        deleted = self.manager.prune_archives(self.backup_dir)

        # 검증
        remaining = sorted(p.name for p in self.backup_dir.iterdir())
        self.assertEqual(len(remaining), 30)
        self.assertEqual(remaining, sorted(p.name for p in bundles[5:]))
        self.assertEqual(sorted(deleted), sorted(bundles[:5]))

    def test_retention_bound_over_many_runs(self):
        """실행을 반복해도 항상 최신 30개만 유지"""
        created = []
        for run in range(40):
            created.extend(self._make_bundles(1, offset=run))
            self.manager.prune_archives(self.backup_dir)

            remaining = {p.name for p in self.backup_dir.iterdir()}
            self.assertLessEqual(len(remaining), 30)
            self.assertEqual(remaining, {p.name for p in created[-30:]})

    def test_ignores_non_matching_files(self):
        """이름 규칙에 맞지 않는 파일은 건드리지 않음"""
        self._make_bundles(32)
        others = [
            make_file(self.backup_dir, "other_2020.zip", self.base_time - 1000),
            make_file(self.backup_dir, "backup_2020.txt", self.base_time - 1000),
            make_file(self.backup_dir, "C1_backup_2020.mbz", self.base_time - 1000),
        ]

        self.manager.prune_archives(self.backup_dir)

        for path in others:
            self.assertTrue(path.exists(), path.name)
        zips = [p for p in self.backup_dir.iterdir() if ARCHIVE_PATTERN.matches(p)]
        self.assertEqual(len(zips), 30)

    def test_keeps_31_newest_logs(self):
        """로그는 31개까지 유지"""
        log_dir = self.root / "other_logs"
        log_dir.mkdir()
        for i in range(40):
            make_file(log_dir, f"backup_2024-01-01_00-00-{i:02d}.log", self.base_time + i)

        deleted = self.manager.prune_logs(log_dir)

        self.assertEqual(len(deleted), 9)
        logs = [p for p in log_dir.iterdir() if LOG_PATTERN.matches(p)]
        self.assertEqual(len(logs), 31)
        self.assertTrue((log_dir / "backup_2024-01-01_00-00-39.log").exists())
        self.assertFalse((log_dir / "backup_2024-01-01_00-00-00.log").exists())

    def test_delete_failure_does_not_abort(self):
        """삭제 실패가 있어도 나머지 파일은 계속 삭제"""
        bundles = self._make_bundles(33)
        locked = bundles[0]
        original_unlink = Path.unlink

        def fake_unlink(path, *args, **kwargs):
            if path.name == locked.name:
                raise PermissionError("locked")
            return original_unlink(path, *args, **kwargs)

        with patch.object(Path, "unlink", new=fake_unlink):
            deleted = self.manager.prune_archives(self.backup_dir)

        # 검증
        self.assertEqual(sorted(deleted), sorted(bundles[1:3]))
        self.assertTrue(locked.exists())
        log_text = self.run_log.log_file.read_text(encoding="utf-8")
        self.assertIn(f"WARNING: Failed to delete old backup archive: {locked.name}", log_text)

    def test_missing_directory_is_noop(self):
        """디렉토리가 없으면 아무것도 하지 않음"""
        self.assertEqual(self.manager.prune_archives(self.root / "missing"), [])

    def test_fewer_than_limit_keeps_everything(self):
        """보관 개수 이하이면 삭제하지 않음"""
        self._make_bundles(10)

        self.assertEqual(self.manager.prune_archives(self.backup_dir), [])
        self.assertEqual(len(list(self.backup_dir.iterdir())), 10)

    def test_custom_predicate_and_keep_count(self):
        """임의의 조건과 보관 개수로 적용"""
        for i in range(5):
            make_file(self.backup_dir, f"item_{i}.dat", self.base_time + i)

        deleted = self.manager.prune(
            self.backup_dir, lambda p: p.suffix == ".dat", keep_count=2
        )

        self.assertEqual(len(deleted), 3)
        self.assertEqual(
            sorted(p.name for p in self.backup_dir.iterdir()), ["item_3.dat", "item_4.dat"]
        )


if __name__ == "__main__":
    unittest.main()
