from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

VariantMap = Mapping[str, str]


@dataclass(frozen=True)
class JobVariant:
    """A single registry row: one variant of one job."""

    job_name: str
    variant_name: str
    variant_value: str


def compare_variants(
    expected: Mapping[str, VariantMap],
    current: Mapping[str, VariantMap],
) -> Tuple[List[JobVariant], List[JobVariant], List[JobVariant], List[str]]:
    """Compare expected job variants against what the registry currently holds.

    Returns (inserts, updates, deletes, delete_jobs):
      - inserts: variants missing from the registry, including every variant of a new job
      - updates: variants whose value changed
      - deletes: variants no longer expected for a job that is still expected
      - delete_jobs: jobs no longer expected at all; their rows are removed in one
        go, so they never contribute per-variant deletes
    A missing key and an empty string are different: '' is a real value.
    """
    inserts: List[JobVariant] = []
    updates: List[JobVariant] = []
    deletes: List[JobVariant] = []
    delete_jobs: List[str] = []

    for job_name, expected_variants in expected.items():
        current_variants = current.get(job_name)
        if current_variants is None:
            # Net new job
            for k, v in expected_variants.items():
                inserts.append(JobVariant(job_name, k, v))
            continue

        for k, v in expected_variants.items():
            if k not in current_variants:
                inserts.append(JobVariant(job_name, k, v))
            elif current_variants[k] != v:
                updates.append(JobVariant(job_name, k, v))

        for k, v in current_variants.items():
            if k not in expected_variants:
                deletes.append(JobVariant(job_name, k, v))

    for job_name in current:
        if job_name not in expected:
            delete_jobs.append(job_name)

    return inserts, updates, deletes, delete_jobs


def group_rows(rows) -> Dict[str, Dict[str, str]]:
    """Fold (job, variant, value) rows into {job: {variant: value}}."""
    out: Dict[str, Dict[str, str]] = {}
    for row in rows:
        out.setdefault(row.job_name, {})[row.variant_name] = row.variant_value
    return out
