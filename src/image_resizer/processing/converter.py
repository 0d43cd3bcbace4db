"""基于 Pillow 的缩放、锐化与编码。"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from PIL import Image, ImageFilter

from image_resizer.core.config import DEFAULT_SHARPEN_PERCENT, RunConfig
from image_resizer.core.exceptions import ConvertError
from image_resizer.core.models import ImageFormat
from image_resizer.processing.image_loader import DECODE_ERRORS, load_frames

LOGGER = logging.getLogger(__name__)

SaveOptionsBuilder = Callable[[RunConfig], dict[str, Any]]

# 16 位灰度：以 32 位整数缩放，写出时还原为 I;16
DEEP_GRAY_MODES = {"I", "I;16", "I;16B", "I;16L"}
DEEP_GRAY_FORMATS = {ImageFormat.PNG, ImageFormat.TIFF, ImageFormat.PGM}


@dataclass(slots=True)
class ConversionSettings:
    """针对某一格式构造出的转换参数。"""

    pillow_format: str
    width: int
    height: int
    shrink_only: bool
    sharpen_percent: int
    keep_profile: bool
    animated: bool = False
    save_options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FormatProfile:
    pillow_format: str
    build_options: SaveOptionsBuilder
    carries_profile: bool
    animated: bool = False


def _dpi(config: RunConfig) -> dict[str, Any]:
    if config.ppi is None:
        return {}
    return {"dpi": (config.ppi, config.ppi)}


def _jpeg_options(config: RunConfig) -> dict[str, Any]:
    return {
        "quality": config.quality,
        "optimize": True,
        "subsampling": 2 if config.chroma_quartered else 0,
        **_dpi(config),
    }


def _png_options(config: RunConfig) -> dict[str, Any]:
    return {"optimize": True, **_dpi(config)}


def _tiff_options(config: RunConfig) -> dict[str, Any]:
    return {"compression": "tiff_lzw", **_dpi(config)}


def _webp_options(config: RunConfig) -> dict[str, Any]:
    return {"quality": config.quality, "method": 6}


def _no_options(config: RunConfig) -> dict[str, Any]:
    return {}


FORMAT_PROFILES: dict[ImageFormat, FormatProfile] = {
    ImageFormat.JPEG: FormatProfile("JPEG", _jpeg_options, carries_profile=True),
    ImageFormat.PNG: FormatProfile("PNG", _png_options, carries_profile=True),
    ImageFormat.TIFF: FormatProfile("TIFF", _tiff_options, carries_profile=True),
    ImageFormat.WEBP: FormatProfile("WEBP", _webp_options, carries_profile=True),
    ImageFormat.PGM: FormatProfile("PPM", _no_options, carries_profile=False),
    ImageFormat.GIF: FormatProfile("GIF", _no_options, carries_profile=False, animated=True),
}


def build_settings(image_format: ImageFormat, config: RunConfig) -> Optional[ConversionSettings]:
    """按识别出的格式构造转换参数，不支持的格式返回 ``None``。"""

    profile = FORMAT_PROFILES.get(image_format)
    if profile is None:
        return None

    return ConversionSettings(
        pillow_format=profile.pillow_format,
        width=config.side_maximum,
        height=config.side_maximum,
        shrink_only=config.only_shrink,
        sharpen_percent=DEFAULT_SHARPEN_PERCENT if config.sharpen else 0,
        keep_profile=config.remain_profile and profile.carries_profile,
        animated=profile.animated,
        save_options=profile.build_options(config),
    )


def fit_size(size: tuple[int, int], bound: tuple[int, int], shrink_only: bool) -> tuple[int, int]:
    """计算保持宽高比、落在边界框内的目标尺寸。"""

    width, height = size
    ratio = min(bound[0] / width, bound[1] / height)
    if ratio == 1 or (shrink_only and ratio > 1):
        return size
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def convert(input_path: Path, output_path: Path, image_format: ImageFormat, config: RunConfig) -> None:
    """缩放 ``input_path`` 并以原格式写入 ``output_path``。"""

    settings = build_settings(image_format, config)
    if settings is None:
        raise ConvertError(f"不支持的格式 {image_format.value}: {input_path}")

    frames, info = load_frames(input_path)
    if not settings.animated:
        for extra in frames[1:]:
            extra.close()
        frames = frames[:1]

    durations = [frame.info.get("duration", info.get("duration", 100)) for frame in frames]
    try:
        processed = [_process_frame(frame, settings, image_format) for frame in frames]
    except DECODE_ERRORS as exc:
        raise ConvertError(f"缩放失败: {input_path}") from exc
    finally:
        _close_all(frames)

    save_params = dict(settings.save_options)
    if settings.keep_profile:
        for key in ("icc_profile", "exif"):
            if info.get(key):
                save_params[key] = info[key]
    if settings.animated and len(processed) > 1:
        save_params.update(
            save_all=True,
            append_images=processed[1:],
            loop=info.get("loop", 0),
            duration=durations,
            disposal=2,
        )

    try:
        processed[0].save(output_path, format=settings.pillow_format, **save_params)
    except (OSError, ValueError) as exc:
        raise ConvertError(f"写入文件失败: {output_path}") from exc
    finally:
        _close_all(processed)

    LOGGER.debug("%s -> %s (%s)", input_path, output_path, settings.pillow_format)


def _process_frame(frame: Image.Image, settings: ConversionSettings, image_format: ImageFormat) -> Image.Image:
    deep_gray = image_format in DEEP_GRAY_FORMATS and frame.mode in DEEP_GRAY_MODES
    image = frame.convert("I") if deep_gray else _normalize_mode(frame, image_format)
    target = fit_size(image.size, (settings.width, settings.height), settings.shrink_only)
    if target == image.size:
        resized = image.copy() if image is frame else image
    else:
        resized = image.resize(target, Image.Resampling.LANCZOS)
    if deep_gray:
        # UnsharpMask 不支持 32 位整数模式；转换到 I;16 时超出 0~65535 的值被截断
        return resized.convert("I;16")
    if target == image.size:
        return resized

    if settings.sharpen_percent > 0:
        resized = resized.filter(ImageFilter.UnsharpMask(radius=1.0, percent=settings.sharpen_percent, threshold=2))
    return resized


def _normalize_mode(image: Image.Image, image_format: ImageFormat) -> Image.Image:
    """转换为目标编码器可以写入、且能进行滤波的模式。"""

    if image_format is ImageFormat.PGM:
        return image if image.mode == "L" else image.convert("L")
    if image_format is ImageFormat.JPEG:
        return image if image.mode in {"RGB", "L", "CMYK"} else image.convert("RGB")
    if image_format is ImageFormat.GIF:
        return image.convert("RGBA")
    if image.mode in {"RGB", "RGBA", "L"}:
        return image
    if image.mode in {"LA", "PA"} or (image.mode == "P" and "transparency" in image.info):
        return image.convert("RGBA")
    return image.convert("RGB")


def _close_all(images: list[Image.Image]) -> None:
    for img in images:
        img.close()
