"""日志工具。"""

from __future__ import annotations

import logging

# Pillow 在 DEBUG 级别会逐块打印 PNG/TIFF 解析细节
NOISY_LOGGERS = ("PIL",)


def setup_logging(level: int = logging.WARNING) -> None:
    """初始化项目日志配置，工作线程名写入每条日志。"""

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s",
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
