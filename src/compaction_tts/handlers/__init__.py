from .tts_request_handler import TTSRequestHandler

__all__ = ["TTSRequestHandler"]
