"""Registry storage: the job_variants table behind a five-operation interface.

The syncer only needs these operations, so tests can swap in an in-memory
store and any other backend can be plugged in by implementing VariantStore.
"""
from __future__ import annotations

from typing import Callable, ContextManager, List, Protocol, Sequence

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import JobVariant as JobVariantRow
from db.session import get_session
from variantregistry.diff import JobVariant


class RegistryReadError(Exception):
    """Loading the current registry contents failed; the sync cannot proceed."""


class VariantStore(Protocol):
    def load_rows(self) -> List[JobVariant]:
        """All rows, ordered by job name then variant name."""

    def insert_rows(self, rows: Sequence[JobVariant]) -> None:
        ...

    def update_variant(self, job_name: str, variant_name: str, variant_value: str) -> None:
        ...

    def delete_variant(self, job_name: str, variant_name: str, variant_value: str) -> None:
        ...

    def delete_job(self, job_name: str) -> None:
        ...


class SQLVariantStore:
    """VariantStore over the SQLAlchemy job_variants table.

    Every write runs in its own transaction so one failed statement does not
    take earlier work down with it.
    """

    def __init__(self, session_factory: Callable[[], ContextManager[Session]] = get_session):
        self._session_factory = session_factory

    def load_rows(self) -> List[JobVariant]:
        stmt = (
            select(JobVariantRow.job_name, JobVariantRow.variant_name, JobVariantRow.variant_value)
            .order_by(JobVariantRow.job_name, JobVariantRow.variant_name)
        )
        try:
            with self._session_factory() as session:
                return [JobVariant(j, n, v) for j, n, v in session.execute(stmt)]
        except SQLAlchemyError as e:
            raise RegistryReadError(f"error querying current job variants: {e}") from e

    def insert_rows(self, rows: Sequence[JobVariant]) -> None:
        if not rows:
            return
        payload = [
            {"job_name": r.job_name, "variant_name": r.variant_name, "variant_value": r.variant_value}
            for r in rows
        ]
        with self._session_factory() as session:
            session.execute(insert(JobVariantRow), payload)
            session.commit()

    def update_variant(self, job_name: str, variant_name: str, variant_value: str) -> None:
        stmt = (
            update(JobVariantRow)
            .where(JobVariantRow.job_name == job_name, JobVariantRow.variant_name == variant_name)
            .values(variant_value=variant_value)
        )
        with self._session_factory() as session:
            session.execute(stmt)
            session.commit()

    def delete_variant(self, job_name: str, variant_name: str, variant_value: str) -> None:
        stmt = delete(JobVariantRow).where(
            JobVariantRow.job_name == job_name,
            JobVariantRow.variant_name == variant_name,
            JobVariantRow.variant_value == variant_value,
        )
        with self._session_factory() as session:
            session.execute(stmt)
            session.commit()

    def delete_job(self, job_name: str) -> None:
        with self._session_factory() as session:
            session.execute(delete(JobVariantRow).where(JobVariantRow.job_name == job_name))
            session.commit()
