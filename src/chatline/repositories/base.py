"""Shared helpers for repository classes."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chatline.services.errors import ConflictError, StorageFailure

logger = logging.getLogger(__name__)


def commit_or_raise(session: Session, action: str, *, conflict: str | None = None) -> None:
    """Commit the unit of work, converting driver errors into domain errors.

    When ``conflict`` is given, a constraint violation means a concurrent
    writer got there first and is raised as ``ConflictError(conflict)``.
    Every other failure becomes ``StorageFailure``.
    """
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        if conflict is not None:
            logger.info("Conflict while trying to %s: %s", action, exc.orig)
            raise ConflictError(conflict) from exc
        logger.error("Storage failure while trying to %s: %s", action, exc)
        raise StorageFailure(f"Could not {action}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Storage failure while trying to %s: %s", action, exc)
        raise StorageFailure(f"Could not {action}") from exc
