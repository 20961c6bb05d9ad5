import unittest

from variantregistry.reports import (
    ALL_COLUMN,
    TestReport,
    install_report,
    variant_tests_report,
)


def _r(name, variant, runs, successes):
    return TestReport(name=name, variant=variant, runs=runs, successes=successes, failures=runs - successes)


class TestVariantTestsReport(unittest.TestCase):
    def test_all_column_sums_variants(self):
        reports = [
            _r("install should succeed: overall", "aws", 10, 9),
            _r("install should succeed: overall", "gcp", 10, 7),
        ]
        columns, tests = variant_tests_report(reports, test_names=["install should succeed: overall"])
        self.assertEqual(columns, [ALL_COLUMN, "aws", "gcp"])
        overall = tests["install should succeed: overall"][ALL_COLUMN]
        self.assertEqual((overall.runs, overall.successes, overall.failures), (20, 16, 4))
        self.assertAlmostEqual(overall.pass_percentage, 80.0)

    def test_unrelated_tests_filtered_out(self):
        reports = [
            _r("operator install openshift-apiserver", "aws", 5, 5),
            _r("install should succeed: infrastructure", "aws", 5, 4),
            _r("[sig-network] operator install ignored", "aws", 5, 0),
            _r("some other test", "metal", 5, 0),
        ]
        columns, tests = variant_tests_report(
            reports, test_prefixes=["operator install ", "install should succeed: "],
        )
        self.assertEqual(sorted(tests), ["install should succeed: infrastructure",
                                         "operator install openshift-apiserver"])
        self.assertNotIn("metal", columns)

    def test_substring_selection(self):
        reports = [_r("[sig-storage] csi upgrade works", "aws", 2, 2), _r("unrelated", "aws", 1, 1)]
        _, tests = variant_tests_report(reports, test_substrings=["csi upgrade"])
        self.assertEqual(list(tests), ["[sig-storage] csi upgrade works"])

    def test_all_report_callback(self):
        reports = [_r("t", "aws", 1, 1)]
        _, tests = variant_tests_report(
            reports, test_names=["t"], all_report=lambda name: _r(name, ALL_COLUMN, 100, 50),
        )
        self.assertEqual(tests["t"][ALL_COLUMN].runs, 100)

    def test_no_matches(self):
        columns, tests = variant_tests_report([_r("x", "aws", 1, 1)], test_names=["y"])
        self.assertEqual(columns, [ALL_COLUMN])
        self.assertEqual(tests, {})

    def test_zero_runs_pass_percentage(self):
        self.assertEqual(TestReport(name="t", variant="aws").pass_percentage, 0.0)


class TestInstallReport(unittest.TestCase):
    def test_shape(self):
        report = install_report([
            _r("install should succeed: overall", "aws", 4, 3),
            _r("operator install etcd", "metal", 2, 2),
            _r("e2e something", "aws", 1, 0),
        ])
        self.assertEqual(report["title"], "Install Rates by Operator")
        self.assertEqual(report["column_names"], [ALL_COLUMN, "aws", "metal"])
        self.assertEqual(sorted(report["tests"]), ["install should succeed: overall", "operator install etcd"])


if __name__ == "__main__":
    unittest.main()
