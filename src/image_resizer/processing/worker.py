"""单个文件的处理单元。"""

from __future__ import annotations

import logging

from image_resizer.core.config import RunConfig
from image_resizer.core.exceptions import ConvertError, IdentifyError, OutputDirectoryError
from image_resizer.core.models import Decision, FileOutcome, ImageFormat, WorkItem
from image_resizer.core.output_manager import OverwriteGate
from image_resizer.processing.converter import convert
from image_resizer.processing.image_loader import identify_format

LOGGER = logging.getLogger(__name__)


def run_item(item: WorkItem, config: RunConfig, gate: OverwriteGate) -> FileOutcome:
    """识别 → 过滤 → 覆盖确认 → 转换。

    单个文件的错误在此转换为失败记录，不会影响其他任务；
    ``PromptError`` 例外，它表示标准输入不可用，需要中止整个运行。
    """

    try:
        image_format = identify_format(item.input_path)
    except IdentifyError as exc:
        return FileOutcome(source_path=item.input_path, status="error-identify", message=_describe(exc))

    if image_format is ImageFormat.GIF and not config.allow_gif:
        return FileOutcome(source_path=item.input_path, status="skip-gif")
    if image_format is ImageFormat.OTHER:
        LOGGER.debug("不支持的格式，跳过 %s", item.input_path)
        return FileOutcome(source_path=item.input_path, status="skip-unsupported")

    destination = item.destination
    if item.output_path is not None:
        try:
            decision = gate.resolve(item.output_path, config.force)
        except OutputDirectoryError as exc:
            return FileOutcome(
                source_path=item.input_path,
                status="error-output-dir",
                output_path=destination,
                message=_describe(exc),
            )
        if decision is Decision.SKIP:
            return FileOutcome(source_path=item.input_path, status="skip-declined", output_path=destination)

    try:
        convert(item.input_path, destination, image_format, config)
    except ConvertError as exc:
        return FileOutcome(
            source_path=item.input_path,
            status="error-convert",
            output_path=destination,
            message=_describe(exc),
        )

    return FileOutcome(source_path=item.input_path, status="resized", output_path=destination)


def _describe(exc: Exception) -> str:
    if exc.__cause__ is not None:
        return f"{exc} ({exc.__cause__})"
    return str(exc)
