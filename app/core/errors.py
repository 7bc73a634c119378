"""Error kinds raised inside the voice pipeline."""
from enum import Enum


class ErrorKind(str, Enum):
    COMPLETION_FAILED = "completion_failed"
    MALFORMED_COMPLETION_OUTPUT = "malformed_completion_output"
    RECOGNITION_FAILED = "recognition_failed"
    STT_CALL_FAILED = "stt_call_failed"
    SYNTHESIS_FAILED = "synthesis_failed"


class VoicePipelineError(Exception):
    """Base error; `kind` identifies the failure for structured matching."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CompletionFailed(VoicePipelineError):
    """The completion capability could not be reached or returned nothing."""
    kind = ErrorKind.COMPLETION_FAILED


class MalformedCompletionOutput(VoicePipelineError):
    """The completion text is not a valid intent object."""
    kind = ErrorKind.MALFORMED_COMPLETION_OUTPUT


class STTCallFailed(VoicePipelineError):
    """A single speech-to-text call failed."""
    kind = ErrorKind.STT_CALL_FAILED


class RecognitionFailed(VoicePipelineError):
    """No candidate language produced a transcript. Surfaced to callers."""
    kind = ErrorKind.RECOGNITION_FAILED


class SynthesisFailed(VoicePipelineError):
    """Text-to-speech failed."""
    kind = ErrorKind.SYNTHESIS_FAILED
