"""文件扫描与筛选逻辑。"""

from __future__ import annotations

import glob
import logging
import os
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from photo_shrink.core.exceptions import DiscoveryError

LOGGER = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".tif", ".tiff", ".webp"})

DEFAULT_EXCLUDES: tuple[str, ...] = ("**/node_modules/**",)


def build_exclusions(input_dir: Path, output_dir: Path) -> list[str]:
    """构造排除规则；输出目录位于输入目录内部时禁止再扫描它。

    输出目录在输入目录之外（或与之相同）时不需要额外规则。
    """

    patterns = list(DEFAULT_EXCLUDES)
    try:
        relative = output_dir.resolve().relative_to(input_dir.resolve())
    except ValueError:
        return patterns

    if relative != Path("."):
        patterns.append(f"{glob.escape(relative.as_posix())}/**")
    return patterns


def _raise_discovery_error(exc: OSError) -> None:
    raise DiscoveryError(f"无法读取输入目录 {exc.filename}: {exc.strerror or exc}") from exc


def _iter_candidate_files(root: Path) -> Iterator[Path]:
    """递归遍历目录下的所有普通文件，跳过以 "." 开头的隐藏文件与目录。"""

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_discovery_error):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
        for name in filenames:
            if name.startswith("."):
                continue
            candidate = Path(dirpath) / name
            if candidate.is_file():
                yield candidate


def _matches_any(relative: str, patterns: Sequence[str]) -> bool:
    lowered = relative.lower()
    for pattern in patterns:
        pattern = pattern.lower()
        if fnmatch(lowered, pattern):
            return True
        # "**/x/**" 同样匹配根目录下的 x/
        if pattern.startswith("**/") and fnmatch(lowered, pattern[3:]):
            return True
    return False


def collect_candidates(
    root: Path,
    extensions: Iterable[str] = IMAGE_EXTENSIONS,
    exclude_patterns: Sequence[str] = (),
) -> list[Path]:
    """扫描输入目录，返回匹配扩展名且未被排除的绝对路径（稳定排序）。"""

    resolved_root = root.expanduser().resolve()
    if not resolved_root.is_dir():
        raise DiscoveryError(f"输入目录不存在或不是目录: {resolved_root}")

    wanted = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
    collected: list[Path] = []

    try:
        for candidate in _iter_candidate_files(resolved_root):
            if candidate.suffix.lower() not in wanted:
                continue
            relative = candidate.relative_to(resolved_root).as_posix()
            if exclude_patterns and _matches_any(relative, exclude_patterns):
                LOGGER.debug("排除文件: %s", candidate)
                continue
            collected.append(candidate)
    except OSError as exc:
        raise DiscoveryError(f"无法读取输入目录 {resolved_root}: {exc}") from exc

    collected.sort(key=lambda path: (str(path).lower(), str(path)))
    return collected
