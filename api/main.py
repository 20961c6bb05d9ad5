from __future__ import annotations

from typing import Dict, Generator, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.session import get_session
from db.models import JobVariant


def get_db() -> Generator[Session, None, None]:
    # Wrap the existing contextmanager for FastAPI dependency injection
    with get_session() as s:
        yield s


class JobSummary(BaseModel):
    job_name: str
    variant_count: int


class PaginatedJobs(BaseModel):
    total: int
    limit: int
    offset: int
    items: List[JobSummary]


class JobVariants(BaseModel):
    job_name: str
    variants: Dict[str, str]


class VariantValueCount(BaseModel):
    value: str
    jobs: int


class VariantValues(BaseModel):
    variant_name: str
    values: List[VariantValueCount]


app = FastAPI(title="Job Variant Registry API", version="0.1.0")

# CORS for local dev (adjust later as needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/jobs", response_model=PaginatedJobs)
def list_jobs(
    q: Optional[str] = Query(None, description="Substring match on job name"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    qry = select(JobVariant.job_name, func.count(JobVariant.id).label("n")).group_by(JobVariant.job_name)
    if q:
        qry = qry.where(JobVariant.job_name.ilike(f"%{q}%"))

    total = db.execute(select(func.count()).select_from(qry.subquery())).scalar()
    rows = db.execute(qry.order_by(JobVariant.job_name).offset(offset).limit(limit)).all()
    return PaginatedJobs(
        total=int(total or 0),
        limit=limit,
        offset=offset,
        items=[JobSummary(job_name=job, variant_count=n) for job, n in rows],
    )


@app.get("/jobs/{job_name}/variants", response_model=JobVariants)
def get_job_variants(job_name: str, db: Session = Depends(get_db)):
    rows = db.execute(
        select(JobVariant.variant_name, JobVariant.variant_value)
        .where(JobVariant.job_name == job_name)
        .order_by(JobVariant.variant_name)
    ).all()
    if not rows:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobVariants(job_name=job_name, variants={n: v for n, v in rows})


@app.get("/variants/{variant_name}", response_model=VariantValues)
def get_variant_values(variant_name: str, db: Session = Depends(get_db)):
    """Distinct values of one variant with the number of jobs carrying each."""
    rows = db.execute(
        select(JobVariant.variant_value, func.count(JobVariant.id))
        .where(JobVariant.variant_name == variant_name)
        .group_by(JobVariant.variant_value)
        .order_by(func.count(JobVariant.id).desc(), JobVariant.variant_value)
    ).all()
    return VariantValues(
        variant_name=variant_name,
        values=[VariantValueCount(value=v, jobs=n) for v, n in rows],
    )
