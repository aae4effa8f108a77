import unittest
from dataclasses import FrozenInstanceError

from tests._test_path import SRC  # noqa: F401

from idsheet.validation.report import RuleResult, ValidationReport


class TestValidationReport(unittest.TestCase):
    def test_report_is_frozen(self):
        rr = RuleResult(rule_id="Size", passed=True, message="ok", metrics={"a": 1})
        rep = ValidationReport(passed=True, results=[rr], canvas_size=(1800, 1200), layout="sheet")

        self.assertTrue(rep.passed)
        self.assertEqual(rep.results[0].rule_id, "Size")
        self.assertEqual(rep.canvas_size, (1800, 1200))

        with self.assertRaises(FrozenInstanceError):
            rep.passed = False  # type: ignore[misc]

        with self.assertRaises(FrozenInstanceError):
            rr.message = "changed"  # type: ignore[misc]

    def test_failed_and_find(self):
        ok = RuleResult(rule_id="Size", passed=True, message="ok")
        bad = RuleResult(rule_id="Opaque", passed=False, message="3 pixels are not fully opaque.")
        rep = ValidationReport(passed=False, results=[ok, bad], canvas_size=(413, 531), layout="single")

        self.assertEqual(rep.failed(), [bad])
        self.assertIs(rep.find("Size"), ok)
        self.assertIsNone(rep.find("Lighting"))
