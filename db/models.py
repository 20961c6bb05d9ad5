from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base


Base = declarative_base()


class JobVariant(Base):
    """One classified variant of a CI job, e.g. (job, 'Platform', 'aws').

    The registry holds exactly one row per (job_name, variant_name).
    """

    __tablename__ = "job_variants"
    __table_args__ = (
        UniqueConstraint("job_name", "variant_name", name="uq_job_variants_job_variant"),
    )

    id = Column(Integer, primary_key=True)
    job_name = Column(String(512), nullable=False, index=True)
    variant_name = Column(String(128), nullable=False, index=True)
    # Empty string is a legal value; absence is a missing row.
    variant_value = Column(String(256), nullable=False, default="")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"<JobVariant {self.job_name} {self.variant_name}={self.variant_value}>"
