"""Group test results by variant column.

Backs reports such as install success rates per operator per variant: each
selected test gets one entry per variant it ran under plus an "All" entry
covering every variant.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

ALL_COLUMN = "All"

INSTALL_TEST_NAME = "install should succeed: overall"
INSTALL_TEST_NAME_PREFIX = "install should succeed: "
OPERATOR_INSTALL_PREFIX = "operator install "


@dataclass
class TestReport:
    __test__ = False  # not a pytest class

    name: str
    variant: str
    runs: int = 0
    successes: int = 0
    failures: int = 0
    flakes: int = 0

    @property
    def pass_percentage(self) -> float:
        if not self.runs:
            return 0.0
        return 100.0 * self.successes / self.runs


def combine_reports(name: str, reports: Iterable[TestReport]) -> TestReport:
    """Sum per-variant results into a single report for the All column."""
    out = TestReport(name=name, variant=ALL_COLUMN)
    for r in reports:
        out.runs += r.runs
        out.successes += r.successes
        out.failures += r.failures
        out.flakes += r.flakes
    return out


def _selected(name: str, test_names, test_prefixes, test_substrings) -> bool:
    if name in test_names:
        return True
    if any(name.startswith(p) for p in test_prefixes):
        return True
    return any(s in name for s in test_substrings)


def variant_tests_report(
    test_reports: Iterable[TestReport],
    test_names: Iterable[str] = (),
    test_prefixes: Iterable[str] = (),
    test_substrings: Iterable[str] = (),
    all_report: Optional[Callable[[str], TestReport]] = None,
) -> Tuple[List[str], Dict[str, Dict[str, TestReport]]]:
    """Return (variant columns, {test_name: {variant: report}}).

    Reports usually come from a substring search, which can pick up unintended
    tests, so each one is checked again against the exact names, prefixes and
    substrings. The All column is filled by `all_report(test_name)`; without it
    the per-variant reports are summed.
    """
    names = set(test_names)
    prefixes = list(test_prefixes)
    substrings = list(test_substrings)

    columns = {ALL_COLUMN}
    tests: Dict[str, Dict[str, TestReport]] = {}
    for tr in test_reports:
        if not _selected(tr.name, names, prefixes, substrings):
            continue
        columns.add(tr.variant)
        tests.setdefault(tr.name, {})[tr.variant] = tr

    for test_name, by_variant in tests.items():
        if all_report is not None:
            by_variant[ALL_COLUMN] = all_report(test_name)
        else:
            by_variant[ALL_COLUMN] = combine_reports(test_name, list(by_variant.values()))

    return sorted(columns), tests


def install_report(
    test_reports: Iterable[TestReport],
    all_report: Optional[Callable[[str], TestReport]] = None,
) -> dict:
    """Install success rates by operator by variant."""
    columns, tests = variant_tests_report(
        test_reports,
        test_names=[INSTALL_TEST_NAME],
        test_prefixes=[OPERATOR_INSTALL_PREFIX, INSTALL_TEST_NAME_PREFIX],
        all_report=all_report,
    )
    return {
        "title": "Install Rates by Operator",
        "description": "Install Rates by Operator by Variant",
        "column_names": columns,
        "tests": tests,
    }
