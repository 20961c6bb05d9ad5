#!/usr/bin/env python3
"""Print the variants calculated for one or more job names (read-only).

Handy for checking a rule change before syncing:
  python scripts/60_reports_analysis/classify_jobs.py periodic-ci-openshift-release-master-nightly-4.16-e2e-aws-ovn
  python scripts/60_reports_analysis/classify_jobs.py --jobs jobs.txt --variants-dir variants --json
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from variantregistry.classifier import classify_job
from variantregistry.overrides import VariantFileError, load_variant_files


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Show calculated variants for job names")
    ap.add_argument("names", nargs="*", help="Job names to classify")
    ap.add_argument("--jobs", help="Text file with one job name per line")
    ap.add_argument("--variants-dir", help="Directory of per-job variant override files")
    ap.add_argument("--json", action="store_true", help="Emit one JSON object keyed by job name")
    args = ap.parse_args(argv)

    names = list(args.names)
    if args.jobs:
        for line in Path(args.jobs).read_text(encoding="utf-8").splitlines():
            line = line.split("#", 1)[0].strip()
            if line:
                names.append(line)
    if not names:
        print("No job names given")
        return 2

    overrides = {}
    if args.variants_dir:
        try:
            overrides = load_variant_files(Path(args.variants_dir))
        except VariantFileError as e:
            print(f"ERROR: {e}")
            return 2

    result = {name: classify_job(name, overrides.get(name)) for name in names}
    if args.json:
        print(json.dumps(result, indent=2, sort_keys=True))
        return 0
    for name, variants in result.items():
        print(name)
        for k in sorted(variants):
            print(f"  {k}: {variants[k]}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
