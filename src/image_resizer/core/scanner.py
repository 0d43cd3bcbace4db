"""输入路径分类与文件扫描逻辑。"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Iterator, Optional

from image_resizer.core.exceptions import SetupError
from image_resizer.core.models import PathKind, WorkItem

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "webp", "ico", "pgm"})
GIF_EXTENSION = "gif"


def classify(root: Path) -> PathKind:
    """判断输入路径是单个文件还是目录。"""

    try:
        mode = root.stat().st_mode
    except FileNotFoundError as exc:
        raise SetupError(f"路径不存在: {root}") from exc
    except OSError as exc:
        raise SetupError(f"无法访问路径: {root} ({exc.strerror or exc})") from exc

    if stat.S_ISDIR(mode):
        return PathKind.DIRECTORY
    if stat.S_ISREG(mode):
        return PathKind.FILE
    raise SetupError(f"既不是文件也不是目录: {root}")


def is_eligible_extension(ext: str, allow_gif: bool) -> bool:
    """扩展名预筛选（大小写不敏感，可带或不带前导点）。"""

    lowered = ext.lower().lstrip(".")
    if lowered == GIF_EXTENSION:
        return allow_gif
    return lowered in IMAGE_EXTENSIONS


def _iter_candidate_files(root: Path) -> Iterator[Path]:
    """遍历目录下的所有常规文件；指向文件的链接保留，链接目录不进入。"""

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        base = Path(dirpath)
        for name in filenames:
            candidate = base / name
            if candidate.is_file():
                yield candidate


def collect_work_items(root: Path, output_root: Optional[Path], allow_gif: bool) -> list[WorkItem]:
    """扫描目录，返回所有候选图片对应的任务。"""

    collected: list[WorkItem] = []

    for candidate in _iter_candidate_files(root):
        if not is_eligible_extension(candidate.suffix, allow_gif):
            continue

        output_path = None
        if output_root is not None:
            output_path = output_root / candidate.relative_to(root)

        collected.append(WorkItem(input_path=candidate, output_path=output_path))

    collected.sort(key=lambda x: str(x.input_path).lower())
    return collected
