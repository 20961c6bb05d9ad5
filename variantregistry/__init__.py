"""CI job variant classification and registry sync."""
from .classifier import classify_job, classify_jobs  # noqa: F401
from .diff import JobVariant, compare_variants  # noqa: F401
from .store import RegistryReadError, SQLVariantStore, VariantStore  # noqa: F401
from .syncer import SyncSummary, VariantSyncer, sync_job_variants  # noqa: F401

__all__ = [
    "classify_job",
    "classify_jobs",
    "JobVariant",
    "compare_variants",
    "RegistryReadError",
    "SQLVariantStore",
    "VariantStore",
    "SyncSummary",
    "VariantSyncer",
    "sync_job_variants",
]
