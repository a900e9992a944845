"""
코스 익스포터 연동

익스포트 형식 자체는 외부 시스템의 책임이며, 이 모듈은 호출 규약과
외부 명령 기반 구현만 제공합니다.
"""

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from app.core.error_handling import ConfigurationError, ExportFailure
from config.settings import ExporterConfig, get_exporter_config

logger = logging.getLogger(__name__)


class FatalExportWarning(RuntimeWarning):
    """익스포트를 중단시켜야 하는 진단 (경고가 아닌 실패로 승격됨)"""


@dataclass
class ExportContext:
    """
    한 코스 익스포트 동안만 유효한 컨텍스트

    익스포터는 전역 상태 대신 이 객체로 현재 코스 정보를 받고,
    ``report`` 콜백으로 진단 메시지를 남깁니다.
    """

    code: str
    info: Dict[str, Any]
    report: Callable[[str, str], None]
    scratch_paths: List[Path] = field(default_factory=list)

    def notice(self, message: str) -> None:
        self.report("NOTICE", message)

    def warning(self, message: str) -> None:
        self.report("WARNING", message)


class Exporter(ABC):
    """코스 익스포터 인터페이스"""

    working_dir: Optional[str] = None

    def bootstrap(self) -> None:
        """프로세스당 한 번 필요한 환경 초기화 (기본: 없음)"""

    def resolve(self, code: str) -> Optional[Dict[str, Any]]:
        """코스 코드로 익스포터 컨텍스트 조회 (없으면 None)"""
        return {"code": code}

    @abstractmethod
    def export(self, context: ExportContext) -> Union[str, Path]:
        """코스 전체를 하나의 파일로 내보내고 그 경로를 반환"""

    def release(self, context: ExportContext) -> None:
        """익스포트 중 생성한 임시 경로 정리"""
        for path in context.scratch_paths:
            shutil.rmtree(path, ignore_errors=True)
        context.scratch_paths.clear()


class CommandExporter(Exporter):
    """
    외부 명령 기반 익스포터

    ``EXPORT_COMMAND`` 템플릿의 ``{code}``, ``{output_dir}`` 를 치환하여 실행하고,
    표준 출력의 마지막 줄을 생성된 파일 경로로 간주합니다.
    """

    def __init__(self, config: Optional[ExporterConfig] = None):
        self.config = config or get_exporter_config()
        if not self.config.command:
            raise ConfigurationError(
                "EXPORT_COMMAND가 설정되지 않았습니다", config_key="EXPORT_COMMAND"
            )
        self.working_dir = self.config.working_dir or None

    def bootstrap(self) -> None:
        if not self.config.bootstrap_command:
            return

        logger.info("익스포터 환경 초기화 실행")
        result = subprocess.run(
            shlex.split(self.config.bootstrap_command),
            capture_output=True,
            text=True,
            timeout=self.config.timeout,
        )
        if result.returncode != 0:
            raise ExportFailure(
                f"Exporter bootstrap failed: {result.stderr.strip() or result.returncode}"
            )

    def export(self, context: ExportContext) -> Path:
        output_dir = Path(
            tempfile.mkdtemp(prefix=f"backup_{context.code}_", dir=self.config.temp_dir)
        )
        context.scratch_paths.append(output_dir)

        cmd = [
            part.format(code=context.code, output_dir=str(output_dir))
            for part in shlex.split(self.config.command)
        ]
        logger.debug(f"익스포트 명령 실행: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                cwd=self.working_dir,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired:
            raise ExportFailure(
                f"Export timed out after {self.config.timeout} seconds",
                course_code=context.code,
            )
        except FileNotFoundError as e:
            raise ExportFailure(
                f"Export command not found: {cmd[0]}", course_code=context.code, cause=e
            )

        if result.returncode != 0:
            message = result.stderr.strip() or result.stdout.strip()
            raise ExportFailure(
                message or f"Export command exited with status {result.returncode}",
                course_code=context.code,
            )

        for line in result.stderr.splitlines():
            if line.strip():
                context.notice(line.strip())

        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not lines:
            raise ExportFailure(
                "Export command did not report an output file", course_code=context.code
            )
        output = Path(lines[-1])
        if not output.is_absolute():
            # 상대 경로는 명령을 실행한 디렉토리 기준
            output = Path(self.working_dir or os.getcwd()) / output
        return output
