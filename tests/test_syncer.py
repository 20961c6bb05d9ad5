from __future__ import annotations

import logging
import unittest
from typing import Dict, List, Sequence, Set

from variantregistry.diff import JobVariant
from variantregistry.store import RegistryReadError
from variantregistry.syncer import DEFAULT_BATCH_SIZE, VariantSyncer, sync_job_variants


class MemoryStore:
    """In-memory VariantStore that records calls and can be told to fail."""

    def __init__(self, state: Dict[str, Dict[str, str]] | None = None):
        self.state: Dict[str, Dict[str, str]] = {j: dict(v) for j, v in (state or {}).items()}
        self.insert_calls: List[int] = []
        self.fail_load: Exception | None = None
        self.fail_insert_batches: Set[int] = set()
        self.fail_update_keys: Set[tuple] = set()
        self.fail_delete_keys: Set[tuple] = set()
        self.fail_delete_jobs: Set[str] = set()
        self.writes = 0

    def load_rows(self) -> List[JobVariant]:
        if self.fail_load is not None:
            raise self.fail_load
        return [
            JobVariant(job, name, value)
            for job in sorted(self.state)
            for name, value in sorted(self.state[job].items())
        ]

    def insert_rows(self, rows: Sequence[JobVariant]) -> None:
        self.writes += 1
        batch_no = len(self.insert_calls)
        self.insert_calls.append(len(rows))
        if batch_no in self.fail_insert_batches:
            raise RuntimeError(f"insert batch {batch_no} rejected")
        for r in rows:
            self.state.setdefault(r.job_name, {})[r.variant_name] = r.variant_value

    def update_variant(self, job_name: str, variant_name: str, variant_value: str) -> None:
        self.writes += 1
        if (job_name, variant_name) in self.fail_update_keys:
            raise RuntimeError("update rejected")
        self.state[job_name][variant_name] = variant_value

    def delete_variant(self, job_name: str, variant_name: str, variant_value: str) -> None:
        self.writes += 1
        if (job_name, variant_name) in self.fail_delete_keys:
            raise RuntimeError("delete rejected")
        if self.state.get(job_name, {}).get(variant_name) == variant_value:
            del self.state[job_name][variant_name]

    def delete_job(self, job_name: str) -> None:
        self.writes += 1
        if job_name in self.fail_delete_jobs:
            raise RuntimeError("delete job rejected")
        self.state.pop(job_name, None)


def _many_jobs(n_jobs: int, per_job: int) -> Dict[str, Dict[str, str]]:
    return {f"job-{i:04d}": {f"V{k}": str(k) for k in range(per_job)} for i in range(n_jobs)}


class TestSync(unittest.TestCase):
    def test_converges(self):
        store = MemoryStore({
            "job-a": {"Platform": "aws", "Network": "sdn", "Owner": "eng"},
            "job-gone": {"Platform": "gcp"},
        })
        expected = {
            "job-a": {"Platform": "aws", "Network": "ovn", "Topology": "ha"},
            "job-new": {"Platform": "metal"},
        }
        summary = VariantSyncer(store).sync_job_variants(expected)
        self.assertTrue(summary.ok)
        self.assertEqual(store.state, expected)
        self.assertEqual(summary.planned, {"inserts": 2, "updates": 1, "deletes": 1, "delete_jobs": 1})
        self.assertEqual(summary.applied, summary.planned)
        self.assertEqual(summary.current_jobs, 2)
        self.assertEqual(summary.expected_jobs, 2)

    def test_second_run_is_a_no_op(self):
        store = MemoryStore()
        expected = {"job-a": {"Platform": "aws"}, "job-b": {"Suite": ""}}
        sync_job_variants(store, expected)
        writes = store.writes
        summary = sync_job_variants(store, expected)
        self.assertEqual(store.writes, writes)
        self.assertEqual(summary.planned, {"inserts": 0, "updates": 0, "deletes": 0, "delete_jobs": 0})

    def test_inserts_are_batched(self):
        store = MemoryStore()
        expected = _many_jobs(1201, 1)
        summary = sync_job_variants(store, expected)
        self.assertEqual(DEFAULT_BATCH_SIZE, 500)
        self.assertEqual(store.insert_calls, [500, 500, 201])
        self.assertEqual(summary.applied["inserts"], 1201)

    def test_exact_multiple_of_batch_size(self):
        store = MemoryStore()
        sync_job_variants(store, _many_jobs(10, 10), batch_size=50)
        self.assertEqual(store.insert_calls, [50, 50])

    def test_no_inserts_no_insert_calls(self):
        store = MemoryStore({"job-a": {"X": "1"}})
        sync_job_variants(store, {"job-a": {"X": "2"}})
        self.assertEqual(store.insert_calls, [])

    def test_failed_batch_does_not_stop_the_run(self):
        store = MemoryStore({"old": {"X": "1"}})
        store.fail_insert_batches = {1}
        expected = _many_jobs(1201, 1)
        with self.assertLogs("variantregistry.syncer", level="ERROR"):
            summary = sync_job_variants(store, expected)
        self.assertEqual(store.insert_calls, [500, 500, 201])
        self.assertEqual(summary.applied["inserts"], 701)
        self.assertEqual(len(summary.failures), 1)
        self.assertEqual(summary.failures[0].operation, "insert")
        self.assertIn("rows 501-1000", summary.failures[0].key)
        # later phases still ran
        self.assertNotIn("old", store.state)
        self.assertFalse(summary.ok)

    def test_row_failures_are_isolated(self):
        store = MemoryStore({
            "job-a": {"A": "0", "B": "0", "C": "0"},
            "job-b": {"X": "1"},
            "job-c": {"X": "1"},
        })
        store.fail_update_keys = {("job-a", "A")}
        store.fail_delete_keys = {("job-a", "C")}
        store.fail_delete_jobs = {"job-b"}
        expected = {"job-a": {"A": "1", "B": "1"}}
        with self.assertLogs("variantregistry.syncer", level="ERROR") as logs:
            summary = sync_job_variants(store, expected)

        self.assertEqual(store.state["job-a"], {"A": "0", "B": "1", "C": "0"})
        self.assertIn("job-b", store.state)
        self.assertNotIn("job-c", store.state)
        self.assertEqual(summary.applied, {"inserts": 0, "updates": 1, "deletes": 0, "delete_jobs": 1})
        self.assertEqual(
            sorted((f.operation, f.key) for f in summary.failures),
            [("delete", "job-a C=0"), ("delete_job", "job-b"), ("update", "job-a A=1")],
        )
        self.assertTrue(any("job-b" in line for line in logs.output))

    def test_read_failure_aborts_without_writes(self):
        store = MemoryStore({"job-a": {"X": "1"}})
        store.fail_load = RegistryReadError("connection refused")
        with self.assertLogs("variantregistry.syncer", level="ERROR"):
            with self.assertRaises(RegistryReadError):
                sync_job_variants(store, {"job-b": {"Y": "2"}})
        self.assertEqual(store.writes, 0)

    def test_unexpected_read_error_is_wrapped(self):
        store = MemoryStore()
        store.fail_load = OSError("disk gone")
        with self.assertLogs("variantregistry.syncer", level="ERROR"):
            with self.assertRaises(RegistryReadError) as ctx:
                sync_job_variants(store, {"job-b": {"Y": "2"}})
        self.assertIsInstance(ctx.exception.__cause__, OSError)
        self.assertEqual(store.writes, 0)

    def test_dry_run_plans_but_writes_nothing(self):
        store = MemoryStore({"job-a": {"X": "1"}, "job-b": {"Y": "1"}})
        summary = sync_job_variants(store, {"job-a": {"X": "2", "Z": "3"}}, dry_run=True)
        self.assertTrue(summary.dry_run)
        self.assertEqual(summary.planned, {"inserts": 1, "updates": 1, "deletes": 0, "delete_jobs": 1})
        self.assertEqual(summary.applied, {"inserts": 0, "updates": 0, "deletes": 0, "delete_jobs": 0})
        self.assertEqual(store.writes, 0)

    def test_empty_expected_deletes_everything(self):
        store = MemoryStore({"job-a": {"X": "1"}, "job-b": {"Y": "1"}})
        summary = sync_job_variants(store, {})
        self.assertEqual(store.state, {})
        self.assertEqual(summary.applied["delete_jobs"], 2)

    def test_invalid_batch_size(self):
        with self.assertRaises(ValueError):
            VariantSyncer(MemoryStore(), batch_size=0)

    def test_progress_is_logged(self):
        store = MemoryStore()
        with self.assertLogs("variantregistry.syncer", level=logging.INFO) as logs:
            sync_job_variants(store, _many_jobs(3, 1), batch_size=2)
        self.assertTrue(any("[2/3]" in line for line in logs.output))
        self.assertTrue(any("[3/3]" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
