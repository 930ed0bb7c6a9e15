"""Audio transcoding through ffmpeg."""

from __future__ import annotations

from media_converter.strategies.base import EncoderCapability, EncoderStrategy, freeze

AUDIO_TABLE = freeze(
    {
        "audio/mpeg": EncoderCapability(
            extension="mp3",
            arguments=("-vn", "-acodec", "libmp3lame", "-b:a", "192k"),
        ),
        "audio/wav": EncoderCapability(
            extension="wav",
            arguments=("-vn", "-acodec", "pcm_s16le", "-ar", "44100", "-ac", "2"),
        ),
        "audio/ogg": EncoderCapability(
            extension="ogg",
            arguments=("-vn", "-acodec", "libvorbis", "-q:a", "5"),
        ),
    }
)


class FfmpegAudioStrategy(EncoderStrategy):
    """Convert any ``audio/*`` source to MP3, WAV or Ogg Vorbis."""

    name = "ffmpeg-audio"
    source_family = "audio/"
    default_base_name = "audio"
    table = AUDIO_TABLE
