"""
설정 모듈 단위 테스트
"""

import os
import unittest
from unittest.mock import patch

from config.settings import BackupConfig, get_backup_config


class TestBackupConfig(unittest.TestCase):
    """BackupConfig 테스트"""

    def test_defaults(self):
        config = BackupConfig()

        self.assertEqual(config.export_extension, "mbz")
        self.assertEqual(config.archive_retention, 30)
        self.assertEqual(config.log_retention, 31)

    def test_extension_normalized(self):
        self.assertEqual(BackupConfig(export_extension=".IMSCC").export_extension, "imscc")

    def test_bundle_and_log_extensions_rejected(self):
        """통합 zip이나 실행 로그와 같은 확장자는 사용할 수 없음"""
        for extension in ("zip", ".zip", "log", "LOG"):
            with self.subTest(extension=extension):
                with self.assertRaises(ValueError):
                    BackupConfig(export_extension=extension)

    @patch.dict(os.environ, {"BACKUP_EXPORT_EXTENSION": "zip"})
    def test_rejected_from_environment(self):
        with self.assertRaises(ValueError):
            get_backup_config()

    @patch.dict(
        os.environ,
        {"BACKUP_DIR": "/srv/backups", "BACKUP_ARCHIVE_RETENTION": "10"},
    )
    def test_environment_overrides(self):
        config = get_backup_config()

        self.assertEqual(config.backup_dir, "/srv/backups")
        self.assertEqual(config.archive_retention, 10)


if __name__ == "__main__":
    unittest.main()
