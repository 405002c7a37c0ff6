from .tts import router as tts_router

__all__ = ["tts_router"]
