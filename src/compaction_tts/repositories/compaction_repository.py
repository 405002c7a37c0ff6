"""Repository for compaction document persistence."""

from datetime import datetime, timezone

from compaction_tts.db_models import CompactionEntity
from compaction_tts.domain.models import Compaction, CompactionUpdate
from compaction_tts.exceptions import (
    CompactionNotFoundError,
    CompactionReadError,
    CompactionUpdateError,
    CompactionValidationError,
)
from compaction_tts.logging import setup_logging

logger = setup_logging()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CompactionRepository:
    """
    Handles database operations for compaction documents.

    Reads return validated domain objects; writes merge only the fields
    they are given and never touch the rest of the row.
    """

    def __init__(self, session_factory):
        """
        Initializes the repository.

        Args:
            session_factory: Callable that returns a SQLModel Session context manager.
        """
        self._session_factory = session_factory

    def get_by_id(self, compaction_id: str) -> Compaction:
        """
        Retrieves a compaction document that is ready for synthesis.

        Raises:
            CompactionNotFoundError: If the document does not exist.
            CompactionValidationError: If a required field is missing.
            CompactionReadError: If the database read fails.
        """
        try:
            with self._session_factory() as db_session:
                entity = db_session.get(CompactionEntity, compaction_id)
                if entity is None:
                    raise CompactionNotFoundError(compaction_id)
                return Compaction.from_entity(entity)
        except (CompactionNotFoundError, CompactionValidationError) as e:
            logger.warning(
                "Compaction document unusable",
                extra={"compaction_id": compaction_id, "error": str(e)},
            )
            raise
        except Exception as e:
            logger.exception(
                "Compaction read failed", extra={"compaction_id": compaction_id}
            )
            raise CompactionReadError(compaction_id, cause=e) from e

    def update(self, compaction_id: str, changes: CompactionUpdate) -> None:
        """
        Merges the explicitly set fields of ``changes`` into a document.

        ``updated_at`` is always refreshed.

        Raises:
            CompactionUpdateError: If the document is missing or the write fails.
        """
        fields = changes.model_dump(exclude_unset=True)
        try:
            with self._session_factory() as db_session:
                entity = db_session.get(CompactionEntity, compaction_id)
                if entity is None:
                    raise CompactionNotFoundError(compaction_id)

                for name, value in fields.items():
                    setattr(entity, name, value)
                entity.updated_at = _utcnow()

                db_session.add(entity)
                db_session.commit()

            logger.info(
                "Compaction document updated",
                extra={"compaction_id": compaction_id, "fields": sorted(fields)},
            )
        except Exception as e:
            logger.exception(
                "Compaction update failed",
                extra={"compaction_id": compaction_id, "fields": sorted(fields)},
            )
            raise CompactionUpdateError(compaction_id, cause=e) from e

    def create(self, compaction_id: str, fields: dict) -> None:
        """
        Creates (or replaces) a compaction document. Administrative use only.

        Raises:
            CompactionUpdateError: If the write fails.
        """
        try:
            now = _utcnow()
            entity = CompactionEntity.model_validate(
                {**fields, "id": compaction_id, "created_at": now, "updated_at": now}
            )
            with self._session_factory() as db_session:
                db_session.merge(entity)
                db_session.commit()

            logger.info("Compaction document created", extra={"compaction_id": compaction_id})
        except Exception as e:
            logger.exception(
                "Compaction create failed", extra={"compaction_id": compaction_id}
            )
            raise CompactionUpdateError(compaction_id, cause=e) from e
