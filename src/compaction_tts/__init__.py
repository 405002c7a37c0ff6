from compaction_tts.config import AppConfig, load_config
from compaction_tts.logging import setup_logging

__all__ = ["setup_logging", "AppConfig", "load_config"]
