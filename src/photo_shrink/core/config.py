"""单次转换任务的配置模型。"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from photo_shrink.core.exceptions import InvalidConfigurationError

DEFAULT_INPUT_DIR = Path(".")
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_WIDTH = 500.0
DEFAULT_QUALITY = 75.0


def check_width(value: float) -> float:
    """目标宽度必须是有限的正数。"""

    if not math.isfinite(value) or value <= 0:
        raise InvalidConfigurationError(f"无效的 --width 取值: {value}")
    return value


def check_quality(value: float) -> float:
    """质量取值范围为 (0, 100]。"""

    if not math.isfinite(value) or value <= 0 or value > 100:
        raise InvalidConfigurationError(f"无效的 --quality 取值: {value}")
    return value


def check_workers(value: int) -> int:
    if value < 1:
        raise InvalidConfigurationError(f"无效的 --workers 取值: {value}")
    return value


@dataclass(frozen=True, slots=True)
class Options:
    """一次运行的只读配置，启动时构造一次。"""

    input_dir: Path = DEFAULT_INPUT_DIR
    output_dir: Path = DEFAULT_OUTPUT_DIR
    width: float = DEFAULT_WIDTH
    quality: float = DEFAULT_QUALITY
    force: bool = False
    dry_run: bool = False
    max_workers: int = 1
    report_path: Optional[Path] = None

    def __post_init__(self) -> None:
        check_width(self.width)
        check_quality(self.quality)
        check_workers(self.max_workers)
