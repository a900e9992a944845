"""
배치 작업 기본 클래스

백업 배치 작업이 상속받는 실행 흐름(준비 → 실행 → 후처리)과 결과 타입을 정의합니다.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional

from config.constants import JobStatus, JobType


@dataclass
class JobConfig:
    """배치 작업 설정"""

    job_name: str
    job_type: JobType


@dataclass
class JobResult:
    """작업 실행 결과"""

    job_name: str
    job_type: JobType
    status: JobStatus
    start_time: datetime
    end_time: Optional[datetime] = None
    processed_records: int = 0
    error: Optional[Exception] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        """실행 시간 (초)"""
        if self.end_time and self.start_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    @property
    def error_message(self) -> str:
        return str(self.error) if self.error else ""

    @property
    def is_success(self) -> bool:
        return self.status == JobStatus.COMPLETED

    @property
    def is_failure(self) -> bool:
        return self.status == JobStatus.FAILED


class BaseJob(ABC):
    """배치 작업 기본 클래스"""

    def __init__(self, config: JobConfig):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{config.job_name}")

    @abstractmethod
    def execute(self) -> JobResult:
        """
        작업 실행 로직

        Returns:
            JobResult: 작업 실행 결과
        """

    def pre_execute(self) -> None:
        """실행 전 준비 (예외를 던지면 execute 없이 실패 처리)"""

    def post_execute(self, result: JobResult) -> None:
        self.logger.info(
            f"작업 실행 후 처리: {self.config.job_name}, 상태: {result.status.value}"
        )

    def on_failure(self, error: Exception) -> None:
        self.logger.error(f"작업 실패 처리: {self.config.job_name}, 오류: {error}")

    def run(self) -> JobResult:
        """
        작업 실행 메인 메서드

        준비 단계나 실행 단계에서 올라온 예외는 결과의 ``error`` 로 보관되어
        호출자가 실패 원인에 따라 종료 상태를 결정할 수 있습니다.

        Returns:
            JobResult: 작업 실행 결과
        """
        result = JobResult(
            job_name=self.config.job_name,
            job_type=self.config.job_type,
            status=JobStatus.PENDING,
            start_time=datetime.now(),
        )

        try:
            self.pre_execute()

            result.status = JobStatus.RUNNING
            self.logger.info(f"작업 실행 시작: {self.config.job_name}")

            result = self.execute()
            result.status = JobStatus.COMPLETED
            result.end_time = datetime.now()

            self.logger.info(
                f"작업 실행 완료: {self.config.job_name}, "
                f"처리 레코드: {result.processed_records}, "
                f"소요 시간: {result.duration_seconds:.2f}초"
            )

            self.post_execute(result)

        except Exception as e:
            result.status = JobStatus.FAILED
            result.end_time = datetime.now()
            result.error = e

            self.logger.error(
                f"작업 실행 실패: {self.config.job_name}, "
                f"오류: {e}, "
                f"소요 시간: {result.duration_seconds:.2f}초"
            )
            self.on_failure(e)

        return result
