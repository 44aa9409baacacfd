"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from photo_shrink.core.config import (
    DEFAULT_INPUT_DIR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_QUALITY,
    DEFAULT_WIDTH,
    Options,
    check_quality,
    check_width,
)
from photo_shrink.core.exceptions import InvalidConfigurationError, PhotoShrinkError
from photo_shrink.core.models import FileOutcome, ProgressUpdate
from photo_shrink.core.report import format_outcome_line
from photo_shrink.processing.pipeline import process_batch
from photo_shrink.utils.logging import setup_logging

app = typer.Typer(help="批量将目录中的图片缩小并转换为 WebP。", add_completion=False)


def _validate_width(value: float) -> float:
    try:
        return check_width(value)
    except InvalidConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _validate_quality(value: float) -> float:
    try:
        return check_quality(value)
    except InvalidConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("转换图片", total=update.total)
        progress.update(task_id, completed=update.completed)

    return callback


def _echo_outcome(outcome: FileOutcome) -> None:
    typer.echo(format_outcome_line(outcome))


@app.command("run")
def run_cli(  # noqa: PLR0913
    input_dir: Path = typer.Option(DEFAULT_INPUT_DIR, "--in", help="输入目录"),
    output_dir: Path = typer.Option(DEFAULT_OUTPUT_DIR, "--out", help="输出目录，不存在时自动创建"),
    width: float = typer.Option(DEFAULT_WIDTH, "--width", callback=_validate_width, help="目标宽度（像素）"),
    quality: float = typer.Option(
        DEFAULT_QUALITY, "--quality", callback=_validate_quality, help="WebP 质量 (0, 100]"
    ),
    force: bool = typer.Option(False, "--force", help="覆盖已存在的输出文件"),
    dry_run: bool = typer.Option(False, "--dry-run", help="只报告将要转换的文件，不写入"),
    max_workers: int = typer.Option(1, "--workers", "-w", min=1, help="并发进程数量"),
    report: Optional[Path] = typer.Option(None, "--report", help="CSV 报告输出路径"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """执行批量转换。

    单个文件失败只会输出 FAIL 行，不影响退出码；只有参数错误或
    扫描前的准备工作失败时才以非零退出码结束。
    """

    setup_logging(logging.DEBUG if verbose else logging.INFO)

    stderr_console = Console(stderr=True)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=stderr_console,
        transient=True,
        disable=not stderr_console.is_terminal,
    )

    try:
        options = Options(
            input_dir=input_dir.expanduser().resolve(),
            output_dir=output_dir.expanduser().resolve(),
            width=width,
            quality=quality,
            force=force,
            dry_run=dry_run,
            max_workers=max_workers,
            report_path=report.expanduser().resolve() if report else None,
        )
        with progress:
            result = process_batch(
                options,
                on_outcome=_echo_outcome,
                progress_callback=_build_progress_callback(progress),
            )
    except PhotoShrinkError as exc:
        typer.echo(f"错误：{exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(result.summary_line())


if __name__ == "__main__":
    app()
