from .transcript import Transcript, TranscriptError, make_system_message

__all__ = ["Transcript", "TranscriptError", "make_system_message"]
