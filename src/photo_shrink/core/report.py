"""控制台行协议与 CSV 报告。"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from photo_shrink.core.models import (
    STATUS_CONVERTED,
    STATUS_DRY_RUN,
    STATUS_SKIPPED,
    FileOutcome,
)

HEADER = ["source_path", "output_path", "status", "message"]


def format_outcome_line(outcome: FileOutcome) -> str:
    """生成 SKIP / OK / FAIL 单行输出。"""

    if outcome.status == STATUS_SKIPPED:
        return f"SKIP {outcome.source_path} (exists)"
    if outcome.status == STATUS_CONVERTED:
        return f"OK {outcome.source_path} -> {outcome.output_path}"
    if outcome.status == STATUS_DRY_RUN:
        return f"OK {outcome.source_path} -> {outcome.output_path} (dry-run)"
    return f"FAIL {outcome.source_path} {outcome.message or 'unknown error'}"


def write_csv_report(outcomes: Iterable[FileOutcome], report_path: Path) -> Path:
    """将处理结果写入 CSV 报告。"""

    report_path.parent.mkdir(parents=True, exist_ok=True)
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for record in outcomes:
            writer.writerow(
                [
                    str(record.source_path),
                    str(record.output_path) if record.output_path else "",
                    record.status,
                    record.message or "",
                ]
            )
    return report_path
