#!/usr/bin/env python3
"""
코스 백업 실행 도구

활성 코스 전체 또는 지정한 코스 하나를 백업합니다.
--schedule 옵션을 주면 매일 정해진 시각에 실행되는 데몬으로 동작합니다.
"""

import argparse
import sys
from typing import List, Optional

from app.core.logger import get_logger
from app.schedulers.backup_scheduler import BackupScheduler
from config.constants import ExitStatus
from config.settings import get_backup_config
from jobs.system_maintenance.course_backup_job import run_course_backup


def build_parser() -> argparse.ArgumentParser:
    backup_config = get_backup_config()
    parser = argparse.ArgumentParser(
        description="코스 백업 생성 (.mbz 익스포트 + zip 통합 + 보관 정책)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
사용 예시:
  course-backup                                  # 활성 코스 전체 백업
  course-backup --course-code=ABC101             # 특정 코스만 백업
  course-backup --backup-dir=/srv/backups        # 백업 디렉토리 지정
  course-backup --schedule                       # 매일 예약 실행
        """,
    )
    parser.add_argument(
        "--backup-dir",
        default=backup_config.backup_dir,
        help=f"백업 디렉토리 경로 (기본값: {backup_config.backup_dir})",
    )
    parser.add_argument(
        "--course-code", default=None, help="지정한 코드의 코스만 백업"
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help=f"매일 {backup_config.schedule_time}에 실행되는 스케줄러로 동작",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """메인 함수"""
    args = build_parser().parse_args(argv)
    logger = get_logger(__name__)

    if args.schedule:
        scheduler = BackupScheduler()
        scheduler.register(
            lambda: run_course_backup(
                backup_dir=args.backup_dir, course_code=args.course_code
            )
        )
        scheduler.start()
        return ExitStatus.SUCCESS.value

    logger.info(f"코스 백업 실행: {args.backup_dir}")
    status = run_course_backup(backup_dir=args.backup_dir, course_code=args.course_code)
    if status is ExitStatus.FAILURE:
        logger.error("백업 디렉토리를 준비할 수 없어 백업을 중단했습니다")
    return status.value


if __name__ == "__main__":
    sys.exit(main())
