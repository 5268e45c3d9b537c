"""
Unit tests for family resolution.

Resolution contract:
- every catalogue alias resolves to its own base family
  (bare NEBOSH aliases collapse to the broad "NEBOSH" family)
- IOSH / EUSR without a variant stay generic placeholders
- refresher detection is tri-state and independent of the family
"""

import unittest

from coursefinder.families import (
    FAMILY_CATALOGUE,
    GENERIC_FAMILIES,
    REFRESHER_CAPABLE,
    as_family,
    base_family,
    closest_families,
    counterpart_family,
    detect_refresher,
    infer_family_label,
    is_refresher_capable,
    resolve_query,
)
from coursefinder.model import ConcreteFamily
from coursefinder.text import normalize


class TestAliasCatalogue(unittest.TestCase):
    def test_every_alias_resolves_to_its_family(self) -> None:
        for entry in FAMILY_CATALOGUE:
            expected = base_family(entry.family)
            for alias in entry.aliases:
                q = normalize(alias)
                want = expected
                if expected.startswith("NEBOSH") and "general" not in q and "construction" not in q:
                    want = "NEBOSH"
                with self.subTest(alias=alias):
                    self.assertEqual(resolve_query(alias).family_name, want)

    def test_refresher_capable_families(self) -> None:
        self.assertEqual(REFRESHER_CAPABLE, ("SMSTS", "SSSTS", "TWC"))
        self.assertTrue(is_refresher_capable("TWC"))
        self.assertFalse(is_refresher_capable("TWS"))
        self.assertFalse(is_refresher_capable(None))


class TestResolveQuery(unittest.TestCase):
    def test_refresher_flags(self) -> None:
        r = resolve_query("smsts refresher")
        self.assertEqual(r.family_name, "SMSTS")
        self.assertIs(r.refresher, True)

        r = resolve_query("sssts standard")
        self.assertEqual(r.family_name, "SSSTS")
        self.assertIs(r.refresher, False)

        self.assertIsNone(resolve_query("hsa").refresher)

    def test_substring_alias_inside_sentence(self) -> None:
        r = resolve_query("Any SMSTS courses in Stratford next month?")
        self.assertEqual(r.family_name, "SMSTS")

    def test_iosh_is_generic(self) -> None:
        r = resolve_query("iosh")
        self.assertIsNotNone(r.family)
        self.assertTrue(r.family.is_generic)
        self.assertEqual(r.family_name, "IOSH")

    def test_eusr_without_session_time_is_generic(self) -> None:
        r = resolve_query("eusr water hygiene")
        self.assertIs(r.family, GENERIC_FAMILIES["EUSR"])

    def test_water_hygiene_time_of_day(self) -> None:
        self.assertEqual(resolve_query("water hygiene course in the afternoon").family_name, "EUSR Water Hygiene PM")
        self.assertEqual(resolve_query("eusr am please").family_name, "EUSR Water Hygiene AM")

    def test_iosh_phrase_without_acronym(self) -> None:
        self.assertEqual(resolve_query("I need managing safely").family_name, "IOSH Managing Safely")

    def test_bare_health_safety_falls_back_to_hsa(self) -> None:
        self.assertEqual(resolve_query("health safety").family_name, "HSA")

    def test_nebosh_narrowing(self) -> None:
        self.assertEqual(resolve_query("nebosh").family_name, "NEBOSH")
        self.assertEqual(resolve_query("nebosh general certificate").family_name, "NEBOSH General")
        self.assertEqual(resolve_query("nebosh certificate in construction").family_name, "NEBOSH Construction")

    def test_unknown_and_empty(self) -> None:
        self.assertIsNone(resolve_query("xyzzy").family)
        empty = resolve_query("")
        self.assertIsNone(empty.family)
        self.assertIsNone(empty.refresher)


class TestRefresherDetection(unittest.TestCase):
    def test_positive_tokens(self) -> None:
        for text in ["smsts refresher", "SMSTS renewal", "twc update", "refresh my sssts"]:
            with self.subTest(text=text):
                self.assertIs(detect_refresher(text), True)

    def test_positive_wins_over_standard(self) -> None:
        self.assertIs(detect_refresher("standard or refresher"), True)

    def test_whole_words_only(self) -> None:
        self.assertIsNone(detect_refresher("refreshments included"))


class TestInferFamilyLabel(unittest.TestCase):
    def test_labels(self) -> None:
        self.assertEqual(infer_family_label("smsts renewal"), "SMSTS Refresher")
        self.assertEqual(infer_family_label("tws refresher"), "TWS")
        self.assertEqual(infer_family_label("sssts standard"), "SSSTS")
        self.assertEqual(infer_family_label("iosh"), "IOSH")
        self.assertIsNone(infer_family_label("xyzzy"))


class TestClosestFamilies(unittest.TestCase):
    def test_typo_suggests_family(self) -> None:
        near = closest_families("smst")
        self.assertEqual(near[0], "SMSTS")
        self.assertIn("SSSTS", near)
        self.assertLessEqual(len(near), 3)

    def test_limit(self) -> None:
        self.assertEqual(len(closest_families("smst", limit=1)), 1)

    def test_nothing_close(self) -> None:
        self.assertEqual(closest_families("xyzzy"), [])


class TestFamilyHelpers(unittest.TestCase):
    def test_counterpart(self) -> None:
        self.assertEqual(counterpart_family("SMSTS Refresher"), "SMSTS")
        self.assertEqual(counterpart_family("SMSTS"), "SMSTS Refresher")
        self.assertEqual(counterpart_family("TWS"), "TWS")

    def test_as_family(self) -> None:
        self.assertIs(as_family("IOSH"), GENERIC_FAMILIES["IOSH"])
        self.assertEqual(as_family("SMSTS"), ConcreteFamily("SMSTS"))
        self.assertIsNone(as_family(None))
        self.assertIsNone(as_family("  "))


if __name__ == "__main__":
    unittest.main()
