"""单个文件的处理单元，可在主进程或工作进程中执行。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from photo_shrink.core.config import Options
from photo_shrink.core.exceptions import CodecError
from photo_shrink.core.models import (
    STATUS_CONVERTED,
    STATUS_DRY_RUN,
    STATUS_FAILED,
    STATUS_SKIPPED,
    FileOutcome,
)
from photo_shrink.core.planner import ACTION_DRY_RUN, ACTION_SKIP, decide
from photo_shrink.processing.codec import convert_image

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ConversionTask:
    """共享同一输出路径的一组输入，按扫描顺序依次处理。"""

    sources: tuple[Path, ...]
    options: Options
    output_dir: Path


def process_candidate(source: Path, options: Options, output_dir: Path) -> FileOutcome:
    """决策并（必要时）转换单个文件，始终返回一条结果。"""

    plan = decide(source, options, output_dir)

    if plan.action == ACTION_SKIP:
        LOGGER.debug("跳过输出（已存在）：%s", plan.destination)
        return FileOutcome(source_path=source, status=STATUS_SKIPPED, output_path=plan.destination)

    if plan.action == ACTION_DRY_RUN:
        return FileOutcome(source_path=source, status=STATUS_DRY_RUN, output_path=plan.destination)

    try:
        size = convert_image(source, plan.destination, options.width, options.quality)
    except CodecError as exc:
        return FileOutcome(
            source_path=source,
            status=STATUS_FAILED,
            output_path=plan.destination,
            message=str(exc),
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("转换时出现未预期的异常：%s", source)
        return FileOutcome(
            source_path=source,
            status=STATUS_FAILED,
            output_path=plan.destination,
            message=str(exc) or type(exc).__name__,
        )

    LOGGER.debug("已转换 %s -> %s (%dx%d)", source, plan.destination, *size)
    return FileOutcome(source_path=source, status=STATUS_CONVERTED, output_path=plan.destination)


def run_task(task: ConversionTask) -> list[FileOutcome]:
    """在工作进程中按顺序处理同一输出路径下的所有输入。"""

    return [process_candidate(source, task.options, task.output_dir) for source in task.sources]
