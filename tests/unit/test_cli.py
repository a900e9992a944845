"""
실행 도구 단위 테스트
"""

import unittest
from unittest.mock import patch

import run_backup
from config.constants import ExitStatus


class TestRunBackupCli(unittest.TestCase):
    """run_backup 명령줄 테스트"""

    def test_parse_arguments(self):
        args = run_backup.build_parser().parse_args(
            ["--backup-dir", "/srv/backups", "--course-code", "ABC101"]
        )

        self.assertEqual(args.backup_dir, "/srv/backups")
        self.assertEqual(args.course_code, "ABC101")
        self.assertFalse(args.schedule)

    @patch("run_backup.run_course_backup", return_value=ExitStatus.SUCCESS)
    def test_success_exit_code(self, mock_run):
        """정상 실행은 0 반환"""
        code = run_backup.main(["--backup-dir", "/srv/backups"])

        self.assertEqual(code, 0)
        mock_run.assert_called_once_with(backup_dir="/srv/backups", course_code=None)

    @patch("run_backup.run_course_backup", return_value=ExitStatus.FAILURE)
    def test_failure_exit_code(self, mock_run):
        """백업 디렉토리 오류는 0이 아닌 값 반환"""
        code = run_backup.main(["--course-code", "ABC101"])

        self.assertNotEqual(code, 0)
        self.assertEqual(mock_run.call_args.kwargs["course_code"], "ABC101")

    @patch("run_backup.BackupScheduler")
    def test_schedule_mode(self, mock_scheduler_cls):
        """--schedule 은 스케줄러를 시작"""
        code = run_backup.main(["--schedule"])

        scheduler = mock_scheduler_cls.return_value
        scheduler.register.assert_called_once()
        scheduler.start.assert_called_once()
        self.assertEqual(code, 0)


if __name__ == "__main__":
    unittest.main()
