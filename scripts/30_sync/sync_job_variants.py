#!/usr/bin/env python3
"""Classify CI jobs and reconcile their variants into the registry table.

Safe by default: runs in dry-run mode, loads the registry and prints how many
rows would be inserted, updated and deleted. Use `--apply` to write.

Inputs:
  --jobs FILE          one job name per line ('#' starts a comment)
  --variants-dir DIR   optional per-job override files (<job_name>.yaml|yml|json)

Examples (PowerShell):
  .\\.venv\\Scripts\\python.exe scripts\\30_sync\\sync_job_variants.py --jobs jobs.txt --variants-dir variants
  .\\.venv\\Scripts\\python.exe scripts\\30_sync\\sync_job_variants.py --jobs jobs.txt --apply --out reports\\sync.json
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path

# scripts/30_sync/ -> scripts -> repo root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from db.session import DB_URL_ENV, reconfigure
from variantregistry.classifier import classify_job
from variantregistry.overrides import VariantFileError, load_variant_files
from variantregistry.store import RegistryReadError, SQLVariantStore
from variantregistry.syncer import DEFAULT_BATCH_SIZE, VariantSyncer


def read_job_names(path: Path) -> list[str]:
    jobs: list[str] = []
    seen: set[str] = set()
    for line in path.read_text(encoding="utf-8").splitlines():
        name = line.split("#", 1)[0].strip()
        if name and name not in seen:
            seen.add(name)
            jobs.append(name)
    return jobs


def build_expected(jobs: list[str], overrides: dict[str, dict[str, str]]) -> dict[str, dict[str, str]]:
    return {job: classify_job(job, overrides.get(job)) for job in jobs}


def parse_args(argv: list[str]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Sync classified job variants into the registry (dry-run by default)")
    ap.add_argument("--jobs", required=True, help="Text file with one job name per line")
    ap.add_argument("--variants-dir", help="Directory of per-job variant override files")
    ap.add_argument("--db-url", dest="db_url", help=f"Override DB URL (else uses {DB_URL_ENV} or default)")
    ap.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE, help="Rows per bulk insert")
    ap.add_argument("--apply", action="store_true", help="Write changes to the registry (default: dry-run)")
    ap.add_argument("--out", help="Write a JSON summary to this path")
    ap.add_argument("--verbose", action="store_true", help="Log every row written")
    return ap.parse_args(argv)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.db_url:
        os.environ[DB_URL_ENV] = args.db_url
        reconfigure(args.db_url)

    jobs_path = Path(args.jobs)
    if not jobs_path.is_file():
        print("Jobs file not found:", jobs_path)
        return 2
    jobs = read_job_names(jobs_path)

    overrides: dict[str, dict[str, str]] = {}
    if args.variants_dir:
        try:
            overrides = load_variant_files(Path(args.variants_dir))
        except VariantFileError as e:
            print(f"ERROR: {e}")
            return 2
        unused = sorted(set(overrides) - set(jobs))
        if unused:
            print(f"[warn] {len(unused)} variant files have no matching job (e.g. {unused[0]})")

    expected = build_expected(jobs, overrides)
    print(f"Classified {len(expected)} jobs")

    try:
        syncer = VariantSyncer(SQLVariantStore(), batch_size=args.batch_size)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 2
    try:
        summary = syncer.sync_job_variants(expected, dry_run=not args.apply)
    except RegistryReadError as e:
        print(f"ERROR: {e}")
        return 1

    mode = "DRY-RUN" if summary.dry_run else "APPLIED"
    print(f"[{mode}] registry had {summary.current_jobs} jobs")
    for op in ("inserts", "updates", "deletes", "delete_jobs"):
        print(f"  {op}: planned={summary.planned.get(op, 0)} applied={summary.applied.get(op, 0)}")
    if summary.failures:
        print(f"  failures: {len(summary.failures)}")
        for f in summary.failures[:10]:
            print(f"    {f.operation} {f.key}: {f.error}")

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(asdict(summary), indent=2), encoding="utf-8")
        print("Wrote summary to", out_path)
    return 0 if summary.ok else 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
