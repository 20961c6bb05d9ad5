#!/usr/bin/env python3
from __future__ import annotations

import json
import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import select

from db.models import JobVariant
from db.session import DB_URL_ENV, get_session, reconfigure


def show(job_names: list[str]) -> int:
    missing = 0
    with get_session() as session:
        for job in job_names:
            rows = session.execute(
                select(JobVariant.variant_name, JobVariant.variant_value)
                .where(JobVariant.job_name == job)
                .order_by(JobVariant.variant_name)
            ).all()
            if not rows:
                print(f"Job {job} not found in registry")
                missing += 1
                continue
            print(json.dumps({"job_name": job, "variants": {n: v for n, v in rows}}, indent=2, ensure_ascii=False))
    return missing


def main(argv: list[str] | None = None) -> int:
    import argparse
    ap = argparse.ArgumentParser(description="Show registry variants for jobs")
    ap.add_argument("jobs", nargs="+", help="Job names to display (space-separated)")
    ap.add_argument("--db-url", dest="db_url", help="Override DB URL (else uses VARIANT_REGISTRY_DB_URL or default)")
    args = ap.parse_args(argv)
    if args.db_url:
        os.environ[DB_URL_ENV] = args.db_url
        reconfigure(args.db_url)
    return 1 if show(args.jobs) else 0


if __name__ == '__main__':
    raise SystemExit(main(sys.argv[1:]))
