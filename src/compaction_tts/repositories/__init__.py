from .compaction_repository import CompactionRepository

__all__ = ["CompactionRepository"]
