"""处理流水线：扫描、逐个决策与转换、汇总结果。"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional

from photo_shrink.core.config import Options
from photo_shrink.core.exceptions import OutputDirectoryError
from photo_shrink.core.models import STATUS_FAILED, BatchResult, FileOutcome, ProgressUpdate
from photo_shrink.core.planner import output_path_for
from photo_shrink.core.report import write_csv_report
from photo_shrink.core.scanner import build_exclusions, collect_candidates
from photo_shrink.processing.worker import ConversionTask, process_candidate, run_task

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]
OutcomeCallback = Optional[Callable[[FileOutcome], None]]


def process_batch(
    options: Options,
    on_outcome: OutcomeCallback = None,
    progress_callback: ProgressCallback = None,
) -> BatchResult:
    """批量处理入口：创建输出目录、扫描，再逐个文件决策与转换。"""

    input_dir = options.input_dir.expanduser().resolve()
    output_dir = options.output_dir.expanduser().resolve()
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputDirectoryError(f"无法创建输出目录 {output_dir}: {exc.strerror or exc}") from exc

    LOGGER.info("开始扫描输入路径 %s", input_dir)
    candidates = collect_candidates(input_dir, exclude_patterns=build_exclusions(input_dir, output_dir))
    total = len(candidates)
    LOGGER.info("发现 %d 个候选图片文件", total)

    result = BatchResult(output_dir=output_dir)
    completed = 0

    def record(outcome: FileOutcome) -> None:
        nonlocal completed
        result.record(outcome)
        completed += 1
        if on_outcome:
            on_outcome(outcome)
        _emit_progress(progress_callback, completed, total, outcome.source_path.name)

    _emit_progress(progress_callback, 0, total)

    if options.max_workers <= 1 or total <= 1:
        for source in candidates:
            record(process_candidate(source, options, output_dir))
    else:
        tasks = _group_by_destination(candidates, options, output_dir)
        LOGGER.info("使用 %d 个进程处理 %d 组任务", options.max_workers, len(tasks))
        with ProcessPoolExecutor(max_workers=options.max_workers) as executor:
            future_map = {executor.submit(run_task, task): task for task in tasks}
            for future in as_completed(future_map):
                task = future_map[future]
                try:
                    outcomes = future.result()
                except Exception as exc:  # noqa: BLE001
                    LOGGER.exception("任务执行异常：%s", exc)
                    outcomes = [
                        FileOutcome(source_path=source, status=STATUS_FAILED, message=str(exc))
                        for source in task.sources
                    ]
                for outcome in outcomes:
                    record(outcome)

    LOGGER.info(
        "处理完成：成功 %d，跳过 %d，失败 %d",
        result.converted_count,
        result.skipped_count,
        result.failed_count,
    )

    if options.report_path is not None:
        _write_report(options.report_path, result)

    return result


def _group_by_destination(candidates: list[Path], options: Options, output_dir: Path) -> list[ConversionTask]:
    """同一输出路径的输入归为一组，组内保持扫描顺序，避免并发写同一文件。"""

    groups: dict[Path, list[Path]] = {}
    for source in candidates:
        groups.setdefault(output_path_for(source, output_dir), []).append(source)

    return [
        ConversionTask(sources=tuple(sources), options=options, output_dir=output_dir)
        for sources in groups.values()
    ]


def _emit_progress(
    callback: ProgressCallback,
    completed: int,
    total: int,
    message: Optional[str] = None,
) -> None:
    if not callback:
        return
    callback(ProgressUpdate(total=total, completed=completed, message=message))


def _write_report(report_path: Path, result: BatchResult) -> None:
    try:
        path = write_csv_report(result.all_outcomes(), report_path.expanduser())
    except OSError as exc:
        LOGGER.error("写入报告失败：%s", exc)
        return
    LOGGER.info("报告已写入 %s", path)
