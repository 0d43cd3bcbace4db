"""处理任务的配置模型。"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from image_resizer.core.exceptions import SetupError

DEFAULT_QUALITY = 92
MAX_SIDE = 65535
DEFAULT_SHARPEN_PERCENT = 80


@dataclass(slots=True)
class RunConfig:
    """单次运行的缩放参数，所有工作线程只读共享。"""

    side_maximum: int
    allow_gif: bool = False
    remain_profile: bool = False
    force: bool = False
    only_shrink: bool = False
    sharpen: bool = True
    quality: int = DEFAULT_QUALITY
    ppi: Optional[float] = None
    chroma_quartered: bool = False


@dataclass(slots=True)
class JobConfig:
    """单次批处理任务的配置集合。"""

    source: Path
    options: RunConfig
    output: Optional[Path] = None
    single_thread: bool = False
    max_workers: Optional[int] = None

    def worker_count(self) -> int:
        """线程池大小，默认为逻辑 CPU 数的两倍。"""

        if self.max_workers is not None:
            return max(1, self.max_workers)
        return (os.cpu_count() or 1) * 2


def validate_run_config(config: RunConfig) -> RunConfig:
    """校验数值参数，不合法时抛出 SetupError。"""

    if not 0 < config.side_maximum <= MAX_SIDE:
        raise SetupError(f"side-maximum 必须在 1~{MAX_SIDE} 之间: {config.side_maximum}")
    if not 0 <= config.quality <= 100:
        raise SetupError(f"quality 必须在 0~100 之间: {config.quality}")
    if config.ppi is not None and (not math.isfinite(config.ppi) or config.ppi <= 0):
        raise SetupError(f"PPI 必须大于 0: {config.ppi}")
    return config
