"""日志初始化。"""

from __future__ import annotations

import logging


def setup_logging(level: int = logging.INFO) -> None:
    """初始化项目日志配置，日志写入 stderr，不干扰 stdout 的逐行输出。"""

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(processName)s] %(levelname)s %(name)s: %(message)s",
    )
    # Pillow 在 DEBUG 级别会输出逐块解析信息
    logging.getLogger("PIL").setLevel(max(level, logging.INFO))
