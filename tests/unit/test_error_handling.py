"""
오류 분류 단위 테스트
"""

import unittest

from app.core.error_handling import (
    ArchiveError,
    CandidateLookupError,
    DirectoryError,
    ErrorCategory,
    ErrorCodes,
    ErrorSeverity,
    ExportFailure,
    MissingDataError,
    classify_export_error,
    is_missing_data_message,
)


class TestClassifyExportError(unittest.TestCase):
    """익스포터 오류 분류 테스트"""

    def test_missing_data_markers(self):
        """누락 계열 메시지는 MissingDataError"""
        error = classify_export_error(
            Exception("Warning: Source file not found: /var/data/a.png"), "C1"
        )

        self.assertIsInstance(error, MissingDataError)
        self.assertEqual(error.context.course_code, "C1")
        self.assertEqual(error.severity, ErrorSeverity.LOW)
        self.assertIsNotNone(error.cause)

    def test_export_failure_with_marker_is_downgraded(self):
        """익스포터가 보고한 실패도 누락 계열이면 격하"""
        error = classify_export_error(ExportFailure("ERROR source not found"), "C1")

        self.assertIsInstance(error, MissingDataError)

    def test_other_errors(self):
        """그 밖의 오류는 ExportFailure"""
        original = ExportFailure("exit status 255", course_code="C1")

        self.assertIs(classify_export_error(original, "C1"), original)
        wrapped = classify_export_error(ValueError("bad value"), "C2")
        self.assertIsInstance(wrapped, ExportFailure)
        self.assertEqual(wrapped.message, "bad value")
        self.assertEqual(wrapped.category, ErrorCategory.EXPORT_ERROR)

    def test_lookup_error_kept(self):
        """조회 실패는 그대로 유지"""
        error = CandidateLookupError("Could not get course info for: C1", course_code="C1")

        self.assertIs(classify_export_error(error, "C1"), error)

    def test_is_missing_data_message(self):
        self.assertTrue(is_missing_data_message("Undefined array key 3"))
        self.assertFalse(is_missing_data_message("source file missing"))


class TestErrorTypes(unittest.TestCase):
    """예외 타입 테스트"""

    def test_directory_error_is_critical(self):
        error = DirectoryError("Failed to create backup directory: /x", path="/x")

        self.assertEqual(error.severity, ErrorSeverity.CRITICAL)
        self.assertEqual(error.error_code, ErrorCodes.DIRECTORY_CREATE_FAILED)
        self.assertEqual(error.context.path, "/x")

    def test_archive_error_context(self):
        """오류 ID는 오류 코드로 시작"""
        error = ArchiveError(
            "Failed to delete old backup archive: backup_1.zip",
            path="/b/backup_1.zip",
            error_code=ErrorCodes.ARCHIVE_DELETE_FAILED,
        )

        self.assertEqual(error.error_code, ErrorCodes.ARCHIVE_DELETE_FAILED)
        self.assertEqual(error.category, ErrorCategory.ARCHIVE_ERROR)
        self.assertEqual(error.context.path, "/b/backup_1.zip")
        self.assertTrue(error.context.error_id.startswith(ErrorCodes.ARCHIVE_DELETE_FAILED))


if __name__ == "__main__":
    unittest.main()
