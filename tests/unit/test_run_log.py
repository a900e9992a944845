"""
실행 단위 백업 로그 단위 테스트
"""

import logging
import re
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from app.core.logger import RUN_LOGGER_NAME, RunLog

LINE_PATTERN = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] (.*)$")


class TestRunLog(unittest.TestCase):
    """RunLog 테스트"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.log_dir = Path(self._tmp.name) / "logs"
        self.started_at = datetime(2024, 1, 2, 3, 4, 5)
        self.run_log = RunLog(self.log_dir, started_at=self.started_at)

    def tearDown(self):
        self.run_log.close()
        self._tmp.cleanup()

    def _lines(self):
        return self.run_log.log_file.read_text(encoding="utf-8").splitlines()

    def test_log_file_named_after_start_time(self):
        """로그 파일 이름은 실행 시작 시각으로 고정"""
        self.assertEqual(self.run_log.log_file.name, "backup_2024-01-02_03-04-05.log")
        self.assertEqual(self.run_log.log_file.parent, self.log_dir)

    def test_log_line_format(self):
        """[YYYY-MM-DD HH:MM:SS] message 형식"""
        self.run_log.log("hello world")

        lines = self._lines()
        self.assertEqual(len(lines), 1)
        match = LINE_PATTERN.match(lines[0])
        self.assertIsNotNone(match)
        self.assertEqual(match.group(1), "hello world")

    def test_level_prefixes(self):
        """경고/오류/성공 접두어"""
        self.run_log.warning("w")
        self.run_log.error("e")
        self.run_log.success("s")

        messages = [LINE_PATTERN.match(line).group(1) for line in self._lines()]
        self.assertEqual(messages, ["WARNING: w", "ERROR: e", "SUCCESS: s"])

    def test_appends_to_existing_file(self):
        """같은 파일에 기록하는 다른 인스턴스와 줄이 섞이지 않음"""
        other = RunLog(self.log_dir, started_at=self.started_at)
        try:
            self.run_log.log("first")
            other.log("second")
            self.run_log.log("third")
        finally:
            other.close()

        messages = [LINE_PATTERN.match(line).group(1) for line in self._lines()]
        self.assertEqual(messages, ["first", "second", "third"])

    def test_file_not_created_until_first_message(self):
        """첫 기록 전에는 파일을 만들지 않음"""
        self.assertFalse(self.run_log.log_file.exists())

    def test_repeated_runs_do_not_register_loggers(self):
        """반복 실행해도 전역 로거 목록이 늘어나지 않음"""
        before = len(logging.root.manager.loggerDict)

        for second in range(5):
            run_log = RunLog(self.log_dir, started_at=datetime(2024, 1, 3, 0, 0, second))
            run_log.log("run")
            run_log.close()

        self.assertEqual(len(logging.root.manager.loggerDict), before)
        self.assertNotIn(RUN_LOGGER_NAME, logging.root.manager.loggerDict)
        self.assertEqual(len(list(self.log_dir.glob("backup_2024-01-03_*.log"))), 5)


if __name__ == "__main__":
    unittest.main()
