"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# 单个文件的处理状态。dry-run 在统计中计为成功。
STATUS_CONVERTED = "converted"
STATUS_DRY_RUN = "dry-run"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"

SUCCESS_STATUSES = {STATUS_CONVERTED, STATUS_DRY_RUN}


@dataclass(slots=True)
class FileOutcome:
    """记录单个文件的处理结果（用于控制台输出与报告）。"""

    source_path: Path
    status: str
    output_path: Optional[Path] = None
    message: Optional[str] = None


@dataclass(slots=True)
class ProgressUpdate:
    """批处理过程中的进度信息。"""

    total: int
    completed: int
    message: Optional[str] = None


@dataclass(slots=True)
class BatchResult:
    """一次运行的最终产出。"""

    output_dir: Path
    succeeded: list[FileOutcome] = field(default_factory=list)
    skipped: list[FileOutcome] = field(default_factory=list)
    failed: list[FileOutcome] = field(default_factory=list)

    def record(self, outcome: FileOutcome) -> None:
        """按状态归档一条结果。"""

        if outcome.status in SUCCESS_STATUSES:
            self.succeeded.append(outcome)
        elif outcome.status == STATUS_SKIPPED:
            self.skipped.append(outcome)
        else:
            self.failed.append(outcome)

    @property
    def converted_count(self) -> int:
        return len(self.succeeded)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def total(self) -> int:
        return self.converted_count + self.skipped_count + self.failed_count

    def all_outcomes(self) -> list[FileOutcome]:
        """返回所有结果记录，方便生成报告。"""

        return [*self.succeeded, *self.skipped, *self.failed]

    def summary_line(self) -> str:
        return (
            f"converted={self.converted_count} skipped={self.skipped_count} "
            f"failed={self.failed_count} outDir={self.output_dir}"
        )
