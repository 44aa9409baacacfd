"""基于 Pillow 的解码、等比缩放与 WebP 编码。"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from PIL import Image, ImageFile, UnidentifiedImageError

from photo_shrink.core.exceptions import ImageDecodeError, ImageWriteError

LOGGER = logging.getLogger(__name__)

# 允许加载被截断的文件，尽量容忍可恢复的损坏输入。
ImageFile.LOAD_TRUNCATED_IMAGES = True

OUTPUT_FORMAT = "WEBP"


def convert_image(source: Path, destination: Path, width: float, quality: float) -> tuple[int, int]:
    """解码 source，缩放到不超过 width 的宽度，并以 WebP 写入 destination。

    返回写出图片的尺寸。解码失败抛出 ImageDecodeError，写入失败抛出
    ImageWriteError。
    """

    try:
        with Image.open(source) as img:
            img.load()
            prepared = _normalize_mode(img)
            resized = resize_to_width(prepared, width)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        LOGGER.debug("无法解码图像 %s: %s", source, exc)
        raise ImageDecodeError(f"无法解码图像: {exc}") from exc

    try:
        _write_atomically(resized, destination, quality)
        return resized.size
    finally:
        resized.close()


def resize_to_width(image: Image.Image, width: float) -> Image.Image:
    """按宽度等比缩放，不放大原本更窄的图片。"""

    target_w = max(1, int(round(width)))
    if image.width <= target_w:
        return image.copy()

    target_h = max(1, round(image.height * target_w / image.width))
    return image.resize((target_w, target_h), Image.LANCZOS)


def _normalize_mode(img: Image.Image) -> Image.Image:
    """将任意模式转换为 WebP 可编码的 RGB / RGBA。"""

    if img.mode in {"RGB", "RGBA"}:
        return img

    if img.mode in {"LA", "PA"} or (img.mode == "P" and "transparency" in img.info):
        return img.convert("RGBA")

    return img.convert("RGB")


def _write_atomically(image: Image.Image, destination: Path, quality: float) -> None:
    """先写入同目录临时文件，成功后重命名为目标文件。"""

    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{destination.name}.", suffix=".part", dir=destination.parent
        )
    except OSError as exc:
        raise ImageWriteError(f"无法创建临时文件: {destination}: {exc}") from exc
    os.close(fd)
    tmp_path = Path(tmp_name)

    try:
        image.save(tmp_path, format=OUTPUT_FORMAT, quality=quality)
        os.replace(tmp_path, destination)
    except (OSError, ValueError) as exc:
        raise ImageWriteError(f"写入文件失败: {destination}: {exc}") from exc
    finally:
        tmp_path.unlink(missing_ok=True)
