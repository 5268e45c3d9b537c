"""
Unit tests for catalogue validation.

Reasons:
- ok: concrete family, refresher availability matches
- missing_family: nothing recognized -> nearest families as suggestions
- needs_variant: IOSH / EUSR -> exactly the two concrete variants
- variant_not_offered: refresher asked for a family without one
"""

import unittest

from coursefinder.validate import validate_course_query


def _labels(result) -> list:
    return [s.label for s in result.suggestions]


class TestValidateCourseQuery(unittest.TestCase):
    def test_iosh_needs_variant(self) -> None:
        qc = validate_course_query("iosh")
        self.assertEqual(qc.reason, "needs_variant")
        self.assertFalse(qc.exists)
        self.assertEqual(qc.recognized_family, "IOSH")
        self.assertEqual(_labels(qc), ["IOSH Managing Safely", "IOSH Working Safely"])

    def test_eusr_needs_variant(self) -> None:
        qc = validate_course_query("eusr water hygiene")
        self.assertEqual(qc.reason, "needs_variant")
        self.assertEqual(_labels(qc), ["EUSR Water Hygiene AM", "EUSR Water Hygiene PM"])

    def test_tws_refresher_not_offered(self) -> None:
        qc = validate_course_query("tws refresher")
        self.assertEqual(qc.reason, "variant_not_offered")
        self.assertFalse(qc.exists)
        self.assertIsNone(qc.normalized_family)
        self.assertIs(qc.refresher_requested, True)

        labels = _labels(qc)
        self.assertEqual(labels[0], "TWS (Standard)")
        self.assertEqual(labels[1], "TWC Refresher")
        self.assertEqual(len(labels), 3)
        self.assertTrue(all(label.endswith("Refresher") for label in labels[1:]))

    def test_unknown_course_still_gets_suggestions(self) -> None:
        qc = validate_course_query("xyzzy")
        self.assertEqual(qc.reason, "missing_family")
        self.assertFalse(qc.exists)
        self.assertIsNone(qc.recognized_family)
        self.assertTrue(qc.suggestions)

    def test_typo_suggests_family_with_refresher_variant(self) -> None:
        qc = validate_course_query("smst")
        self.assertEqual(qc.reason, "missing_family")
        self.assertEqual(_labels(qc)[:2], ["SMSTS", "SMSTS Refresher"])

    def test_refresher_requested(self) -> None:
        qc = validate_course_query("sssts refresher")
        self.assertEqual(qc.reason, "ok")
        self.assertTrue(qc.exists)
        self.assertEqual(qc.recognized_family, "SSSTS")
        self.assertEqual(qc.normalized_family, "SSSTS Refresher")
        self.assertEqual(qc.suggestions, [])

    def test_refresher_unspecified_or_declined(self) -> None:
        qc = validate_course_query("smsts")
        self.assertEqual(qc.normalized_family, "SMSTS")
        self.assertIsNone(qc.refresher_requested)

        qc = validate_course_query("sssts standard")
        self.assertEqual(qc.normalized_family, "SSSTS")
        self.assertIs(qc.refresher_requested, False)

    def test_broad_nebosh_is_searchable(self) -> None:
        qc = validate_course_query("nebosh")
        self.assertEqual(qc.reason, "ok")
        self.assertEqual(qc.normalized_family, "NEBOSH")


if __name__ == "__main__":
    unittest.main()
