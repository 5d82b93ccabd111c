"""Repository base: session ownership, commit/rollback and pagination."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from inkwell.services.errors import AppError
from inkwell.services.pagination import Pagination

logger = logging.getLogger(__name__)


class BaseRepository:
    """Holds the Session every query and transaction of a repository runs on."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def commit(self, conflict: AppError | None = None) -> None:
        """Commit the unit of work; roll back on any failure.

        A unique-constraint violation is re-raised as ``conflict`` when given,
        so racing check-then-insert callers still see a domain error.
        """
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if conflict is not None:
                logger.info("Integrity conflict: %s", conflict.message)
                raise conflict from exc
            raise
        except SQLAlchemyError:
            self.db.rollback()
            raise

    @staticmethod
    def paginate(query: Query[Any], page: Pagination) -> tuple[list[Any], int]:
        """Return (items, total) for an already-ordered query."""
        total = query.order_by(None).count()
        items = query.offset(page.offset).limit(page.limit).all()
        return items, total
