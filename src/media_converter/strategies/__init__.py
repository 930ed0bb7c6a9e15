"""Conversion strategies and their capability tables."""

from .audio import AUDIO_TABLE, FfmpegAudioStrategy
from .base import EncoderCapability, EncoderStrategy
from .identity import PassthroughStrategy
from .image import IMAGE_TABLE, ImageCapability, PillowImageStrategy
from .video import VIDEO_TABLE, FfmpegVideoStrategy

__all__ = [
    "AUDIO_TABLE",
    "IMAGE_TABLE",
    "VIDEO_TABLE",
    "EncoderCapability",
    "EncoderStrategy",
    "FfmpegAudioStrategy",
    "FfmpegVideoStrategy",
    "ImageCapability",
    "PassthroughStrategy",
    "PillowImageStrategy",
]
