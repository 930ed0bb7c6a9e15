"""Video transcoding through ffmpeg."""

from __future__ import annotations

from media_converter.strategies.base import EncoderCapability, EncoderStrategy, freeze

# H.264/AAC is the widely compatible default for every container except WebM.
H264_AAC_ARGUMENTS = (
    "-c:v",
    "libx264",
    "-preset",
    "veryfast",
    "-crf",
    "23",
    "-c:a",
    "aac",
    "-b:a",
    "192k",
)
VP9_OPUS_ARGUMENTS = (
    "-c:v",
    "libvpx-vp9",
    "-b:v",
    "2M",
    "-c:a",
    "libopus",
    "-b:a",
    "160k",
)

VIDEO_TABLE = freeze(
    {
        "video/mp4": EncoderCapability(extension="mp4", arguments=H264_AAC_ARGUMENTS),
        "video/quicktime": EncoderCapability(
            extension="mov", arguments=H264_AAC_ARGUMENTS
        ),
        "video/x-matroska": EncoderCapability(
            extension="mkv", arguments=H264_AAC_ARGUMENTS
        ),
        "video/webm": EncoderCapability(extension="webm", arguments=VP9_OPUS_ARGUMENTS),
    }
)


class FfmpegVideoStrategy(EncoderStrategy):
    """Convert any ``video/*`` source to MP4, MOV, MKV or WebM."""

    name = "ffmpeg-video"
    source_family = "video/"
    default_base_name = "video"
    table = VIDEO_TABLE
