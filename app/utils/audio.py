"""Audio upload validation utilities."""

# Recognition encodings and the container suffix the decoder expects
ENCODING_SUFFIXES = {
    "WEBM_OPUS": ".webm",
    "OGG_OPUS": ".ogg",
    "LINEAR16": ".wav",
    "FLAC": ".flac",
    "MP3": ".mp3",
}


def suffix_for_encoding(encoding: str) -> str:
    """Temp-file suffix for an encoding name; unknown encodings are treated as WebM."""
    return ENCODING_SUFFIXES.get((encoding or "").upper(), ".webm")


def validate_audio_upload(
    audio_bytes: bytes,
    content_type: str | None = None,
    max_size_mb: int = 10,
) -> None:
    """
    Validate an uploaded audio payload.

    Args:
        audio_bytes: Audio file bytes
        content_type: MIME type reported by the client, if any
        max_size_mb: Maximum file size in MB

    Raises:
        ValueError: If validation fails
    """
    if content_type and not content_type.startswith("audio/"):
        raise ValueError("Invalid file type. Only audio files are allowed.")

    if not audio_bytes:
        raise ValueError("No audio file provided.")

    max_size_bytes = max_size_mb * 1024 * 1024
    if len(audio_bytes) > max_size_bytes:
        raise ValueError(f"Audio file too large. Maximum size is {max_size_mb}MB.")
