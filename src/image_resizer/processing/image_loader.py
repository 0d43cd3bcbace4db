"""图片格式识别与加载实现。"""

from __future__ import annotations

import logging
import struct
from pathlib import Path

from PIL import Image, ImageOps, ImageSequence, UnidentifiedImageError

from image_resizer.core.exceptions import ConvertError, IdentifyError
from image_resizer.core.models import ImageFormat

LOGGER = logging.getLogger(__name__)

_PILLOW_FORMATS = {
    "JPEG": ImageFormat.JPEG,
    "MPO": ImageFormat.JPEG,
    "PNG": ImageFormat.PNG,
    "TIFF": ImageFormat.TIFF,
    "WEBP": ImageFormat.WEBP,
    "GIF": ImageFormat.GIF,
}

GRAY_MODES = {"1", "L", "I", "I;16", "I;16B", "F"}

# 损坏文件或超出像素上限时 Pillow 抛出的异常
DECODE_ERRORS = (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError, struct.error)


def identify_format(path: Path) -> ImageFormat:
    """根据文件内容（而非扩展名）识别图片格式。"""

    try:
        with Image.open(path) as img:
            pillow_format = img.format or ""
            mode = img.mode
    except DECODE_ERRORS as exc:
        LOGGER.debug("无法识别图像文件 %s: %s", path, exc)
        raise IdentifyError(f"无法识别图像: {path}") from exc

    if pillow_format == "PPM":
        # Pillow 将 PGM 归入 PPM 插件，通过灰度模式区分
        return ImageFormat.PGM if mode in GRAY_MODES else ImageFormat.OTHER
    return _PILLOW_FORMATS.get(pillow_format, ImageFormat.OTHER)


def load_frames(path: Path) -> tuple[list[Image.Image], dict]:
    """加载全部帧并执行 EXIF 旋转。

    返回帧列表（调用者负责关闭）与原图的 ``info`` 副本。
    """

    try:
        with Image.open(path) as img:
            info = dict(img.info)
            frames = [ImageOps.exif_transpose(frame.copy()) for frame in ImageSequence.Iterator(img)]
    except DECODE_ERRORS as exc:
        LOGGER.debug("无法加载图像文件 %s: %s", path, exc)
        raise ConvertError(f"无法加载图像: {path}") from exc

    if frames and "exif" in frames[0].info:
        # exif_transpose 会重写 Orientation，以修正后的 EXIF 为准
        info["exif"] = frames[0].info["exif"]
    return frames, info
