"""单个文件的转换决策：跳过、演练或执行转换。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from photo_shrink.core.config import Options

OUTPUT_SUFFIX = ".webp"

ACTION_SKIP = "skip"
ACTION_DRY_RUN = "dry-run"
ACTION_CONVERT = "convert"


@dataclass(slots=True)
class ConversionPlan:
    """封装输出路径与决策结果。"""

    action: str
    destination: Path


def output_path_for(candidate: Path, output_dir: Path) -> Path:
    """输出目录 + 去掉扩展名的文件名 + .webp。

    不同目录下同名的输入会映射到同一个输出路径：按稳定的扫描顺序，
    后处理的文件覆盖先前结果（force），或因输出已存在而被跳过。
    """

    return output_dir / f"{candidate.stem}{OUTPUT_SUFFIX}"


def decide(
    candidate: Path,
    options: Options,
    output_dir: Path,
    output_exists: Callable[[Path], bool] = Path.exists,
) -> ConversionPlan:
    destination = output_path_for(candidate, output_dir)

    if not options.force and output_exists(destination):
        return ConversionPlan(action=ACTION_SKIP, destination=destination)
    if options.dry_run:
        return ConversionPlan(action=ACTION_DRY_RUN, destination=destination)
    return ConversionPlan(action=ACTION_CONVERT, destination=destination)
