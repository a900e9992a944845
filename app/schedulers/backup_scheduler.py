"""
코스 백업 스케줄러 (APScheduler 기반)

매일 정해진 시각에 코스 백업 작업을 실행합니다.
"""

from typing import Callable, Optional, Tuple

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MISSED
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from app.core.logger import get_logger
from config.settings import BackupConfig, get_backup_config

JOB_ID = "course_backup"


def parse_schedule_time(value: str) -> Tuple[int, int]:
    """'HH:MM' 형식을 (시, 분)으로 변환"""
    try:
        hour, minute = (int(part) for part in value.split(":", 1))
    except ValueError:
        raise ValueError(f"잘못된 스케줄 시각 형식: {value} (HH:MM 필요)")
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"잘못된 스케줄 시각: {value}")
    return hour, minute


class BackupScheduler:
    """코스 백업 일일 스케줄러"""

    def __init__(self, config: Optional[BackupConfig] = None):
        self.config = config or get_backup_config()
        self.logger = get_logger(__name__)
        self.scheduler = BlockingScheduler(
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 3600,
            },
            timezone=self.config.timezone,
        )
        self.scheduler.add_listener(
            self._job_executed_listener,
            EVENT_JOB_EXECUTED | EVENT_JOB_ERROR | EVENT_JOB_MISSED,
        )

    def register(self, job_function: Callable[[], object]) -> str:
        """백업 작업 등록"""
        hour, minute = parse_schedule_time(self.config.schedule_time)
        job = self.scheduler.add_job(
            func=job_function,
            trigger=CronTrigger(hour=hour, minute=minute, timezone=self.config.timezone),
            id=JOB_ID,
            name="코스 백업",
            replace_existing=True,
        )
        self.logger.info(
            f"코스 백업 작업 등록 완료: 매일 {hour:02d}:{minute:02d} ({self.config.timezone})"
        )
        return job.id

    def _job_executed_listener(self, event):
        """작업 실행 이벤트 리스너"""
        if event.code == EVENT_JOB_MISSED:
            self.logger.warning(f"예약 실행 누락: {event.job_id}")
        elif event.exception:
            self.logger.error(f"예약 작업 실패: {event.job_id}, 오류: {event.exception}")
        else:
            self.logger.info(f"예약 작업 완료: {event.job_id}, 결과: {event.retval}")

    def start(self):
        """스케줄러 시작 (종료될 때까지 블로킹)"""
        self.logger.info("코스 백업 스케줄러 시작")
        try:
            self.scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            self.logger.info("코스 백업 스케줄러 종료")

    def shutdown(self, wait: bool = True):
        """스케줄러 종료"""
        self.scheduler.shutdown(wait=wait)
