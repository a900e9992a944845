"""
백업 대상 코스 조회 서비스

코스 저장소는 외부 시스템이며, 여기서는 읽기 전용으로
코드와 활성 여부만 가져옵니다.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from app.core.error_handling import ConfigurationError
from config.settings import DatabaseConfig, get_database_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """백업 대상 코스 스냅샷"""

    code: str
    active: bool

    def __post_init__(self):
        if not self.code:
            raise ValueError("코스 코드는 비어 있을 수 없습니다")


class CandidateSource(ABC):
    """백업 대상 목록 제공자"""

    @abstractmethod
    def list_candidates(self) -> List[Candidate]:
        """전체 코스 목록 (실행마다 새로 조회)"""


class StaticCandidateSource(CandidateSource):
    """메모리 목록 기반 제공자"""

    def __init__(self, candidates: Iterable[Candidate]):
        self._candidates = list(candidates)

    def list_candidates(self) -> List[Candidate]:
        return list(self._candidates)


class DatabaseCandidateSource(CandidateSource):
    """코스 테이블을 직접 조회하는 제공자"""

    def __init__(
        self, config: Optional[DatabaseConfig] = None, engine: Optional[Engine] = None
    ):
        self.config = config or get_database_config()
        if engine is None:
            if not self.config.url:
                raise ConfigurationError(
                    "DATABASE_URL이 설정되지 않았습니다", config_key="DATABASE_URL"
                )
            engine = create_engine(self.config.url, pool_pre_ping=True)
        self.engine = engine

    def _build_query(self):
        # 식별자는 설정 값이므로 바인딩할 수 없음
        return text(
            f"SELECT {self.config.code_column} AS code, "
            f"{self.config.active_column} AS active "
            f"FROM {self.config.course_table}"
        )

    def _is_active(self, value) -> bool:
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return str(value) not in self.config.inactive_values

    def list_candidates(self) -> List[Candidate]:
        with self.engine.connect() as conn:
            rows = conn.execute(self._build_query()).mappings().all()

        candidates = [
            Candidate(code=str(row["code"]), active=self._is_active(row["active"]))
            for row in rows
            if row["code"]
        ]
        logger.debug(f"코스 {len(candidates)}개 조회")
        return candidates
