"""Reconcile expected job variants with the registry table.

A run loads the whole registry, diffs it against the freshly calculated
variants and applies the difference:

  - new rows are inserted in batches
  - changed values are updated one row at a time
  - variants dropped from a job still in the system are deleted one row at a time
  - jobs that vanished entirely are deleted with a single statement per job

Writes are best effort. A failed batch or row is logged with its keys and the
run moves on; nothing is retried. Failing to read the registry aborts the run
with RegistryReadError since there is no baseline to diff against. There is no
locking: two overlapping runs against the same table can race.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from variantregistry.diff import JobVariant, compare_variants, group_rows
from variantregistry.store import RegistryReadError, VariantStore

_log = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


@dataclass
class SyncFailure:
    operation: str
    key: str
    error: str


@dataclass
class SyncSummary:
    current_jobs: int = 0
    expected_jobs: int = 0
    planned: Dict[str, int] = field(default_factory=dict)
    applied: Dict[str, int] = field(default_factory=dict)
    failures: List[SyncFailure] = field(default_factory=list)
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures


class VariantSyncer:
    def __init__(self, store: VariantStore, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.store = store
        self.batch_size = batch_size

    def load_current_job_variants(self) -> Dict[str, Dict[str, str]]:
        try:
            rows = self.store.load_rows()
        except RegistryReadError:
            _log.error("error loading current job variants", exc_info=True)
            raise
        except Exception as e:
            _log.error("error loading current job variants", exc_info=True)
            raise RegistryReadError(f"error loading current job variants: {e}") from e
        return group_rows(rows)

    def sync_job_variants(self, expected: Mapping[str, Mapping[str, str]], dry_run: bool = False) -> SyncSummary:
        """Bring the registry in line with `expected` ({job_name: {variant: value}})."""
        current = self.load_current_job_variants()
        _log.info("loaded %d current jobs with variants", len(current))

        inserts, updates, deletes, delete_jobs = compare_variants(expected, current)
        summary = SyncSummary(
            current_jobs=len(current),
            expected_jobs=len(expected),
            planned={
                "inserts": len(inserts),
                "updates": len(updates),
                "deletes": len(deletes),
                "delete_jobs": len(delete_jobs),
            },
            applied={"inserts": 0, "updates": 0, "deletes": 0, "delete_jobs": 0},
            dry_run=dry_run,
        )
        if dry_run:
            _log.info(
                "dry run: would insert %d, update %d, delete %d job variants and delete %d jobs",
                len(inserts), len(updates), len(deletes), len(delete_jobs),
            )
            return summary

        _log.info("inserting %d new job variants", len(inserts))
        self._bulk_insert(inserts, summary)

        _log.info("updating %d job variants", len(updates))
        for i, jv in enumerate(updates, start=1):
            try:
                self.store.update_variant(jv.job_name, jv.variant_name, jv.variant_value)
            except Exception as e:
                self._failed(summary, "update", f"{jv.job_name} {jv.variant_name}={jv.variant_value}", e)
                continue
            summary.applied["updates"] += 1
            _log.info("[%d/%d] updated %s %s=%s", i, len(updates), jv.job_name, jv.variant_name, jv.variant_value)

        # Variants removed from a job that is still in the system.
        _log.info("deleting %d job variants", len(deletes))
        for i, jv in enumerate(deletes, start=1):
            try:
                self.store.delete_variant(jv.job_name, jv.variant_name, jv.variant_value)
            except Exception as e:
                self._failed(summary, "delete", f"{jv.job_name} {jv.variant_name}={jv.variant_value}", e)
                continue
            summary.applied["deletes"] += 1
            _log.info("[%d/%d] deleted %s %s", i, len(deletes), jv.job_name, jv.variant_name)

        # Whole jobs go in one statement each, much faster than one variant at a time.
        _log.info("deleting %d jobs", len(delete_jobs))
        for i, job_name in enumerate(delete_jobs, start=1):
            try:
                self.store.delete_job(job_name)
            except Exception as e:
                self._failed(summary, "delete_job", job_name, e)
                continue
            summary.applied["delete_jobs"] += 1
            _log.info("[%d/%d] deleted job %s", i, len(delete_jobs), job_name)

        return summary

    def _bulk_insert(self, inserts: List[JobVariant], summary: SyncSummary) -> None:
        total = len(inserts)
        for start in range(0, total, self.batch_size):
            batch = inserts[start:start + self.batch_size]
            end = start + len(batch)
            try:
                self.store.insert_rows(batch)
            except Exception as e:
                key = f"rows {start + 1}-{end} ({batch[0].job_name} .. {batch[-1].job_name})"
                self._failed(summary, "insert", key, e)
                continue
            summary.applied["inserts"] += len(batch)
            _log.info("[%d/%d] added %d new job variant rows", end, total, len(batch))

    @staticmethod
    def _failed(summary: SyncSummary, operation: str, key: str, error: Exception) -> None:
        _log.error("error syncing job variants (%s %s): %s", operation, key, error)
        summary.failures.append(SyncFailure(operation=operation, key=key, error=str(error)))


def sync_job_variants(store: VariantStore, expected: Mapping[str, Mapping[str, str]],
                      batch_size: int = DEFAULT_BATCH_SIZE, dry_run: bool = False) -> SyncSummary:
    return VariantSyncer(store, batch_size=batch_size).sync_job_variants(expected, dry_run=dry_run)
