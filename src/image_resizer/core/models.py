"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class ImageFormat(Enum):
    """根据文件内容识别出的图片格式。"""

    JPEG = "JPEG"
    PNG = "PNG"
    TIFF = "TIFF"
    WEBP = "WEBP"
    PGM = "PGM"
    GIF = "GIF"
    OTHER = "OTHER"


class Decision(Enum):
    """覆盖确认的结果。"""

    PROCEED = "proceed"
    SKIP = "skip"


class PathKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True, slots=True)
class WorkItem:
    """扫描阶段得到的单个处理任务。

    ``output_path`` 为 ``None`` 时表示原地覆盖输入文件。
    """

    input_path: Path
    output_path: Optional[Path] = None

    @property
    def destination(self) -> Path:
        return self.output_path if self.output_path is not None else self.input_path


@dataclass(slots=True)
class FileOutcome:
    """记录单个文件的处理结果（用于输出/日志）。"""

    source_path: Path
    status: str
    output_path: Optional[Path] = None
    message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == "resized"

    @property
    def is_skip(self) -> bool:
        return self.status.startswith("skip")


@dataclass(slots=True)
class BatchResult:
    """批处理的产出。"""

    succeeded: list[FileOutcome]
    skipped: list[FileOutcome]
    failed: list[FileOutcome]

    def all_outcomes(self) -> list[FileOutcome]:
        """返回所有结果记录。"""

        return [*self.succeeded, *self.skipped, *self.failed]

    def record(self, outcome: FileOutcome) -> None:
        if outcome.is_success:
            self.succeeded.append(outcome)
        elif outcome.is_skip:
            self.skipped.append(outcome)
        else:
            self.failed.append(outcome)
