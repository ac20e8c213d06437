"""
Suppression comment grammar: GUIDELINE, NONMISRA, FALSE_POSITIVE, DEVIATION.
"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from misra_gcs.annotations import AnnotationGrammar, repair_link
from misra_gcs.errors import ErrorCode, ErrorLog


def _mapper(*ids):
    return lambda comment: list(ids)


class TestRepairLink(unittest.TestCase):

    def test_missing_slashes(self):
        self.assertEqual(repair_link("http:example.com"), "http://example.com")

    def test_single_slash(self):
        self.assertEqual(repair_link("http:/example.com"), "http://example.com")

    def test_already_complete(self):
        self.assertEqual(repair_link("http://example.com"), "http://example.com")

    def test_none_and_empty(self):
        self.assertIsNone(repair_link(None))
        self.assertEqual(repair_link(""), "")


class TestGuidelineTags(unittest.TestCase):

    def setUp(self):
        self.grammar = AnnotationGrammar()

    def test_tags_override_tool_ids(self):
        props = self.grammar.parse(
            "-e9029 GUIDELINE(Rule 1.1) GUIDELINE(Rule 2.2)", id_mapper=_mapper("Rule 10.4"))
        self.assertEqual(list(props.suppressions), ["Rule 1.1", "Rule 2.2"])

    def test_tool_ids_when_no_tags(self):
        props = self.grammar.parse("-e9029", id_mapper=_mapper("Rule 10.4", "Rule 10.1"))
        self.assertEqual(list(props.suppressions), ["Rule 10.4", "Rule 10.1"])

    def test_unresolved_comment_has_no_suppressions(self):
        props = self.grammar.parse("-e9029", id_mapper=lambda c: None)
        self.assertEqual(props.suppressions, {})
        self.assertFalse(props.is_non_misra)

    def test_duplicate_ids_collapse(self):
        props = self.grammar.parse("x", id_mapper=_mapper("Rule 1.1", "Rule 1.1"))
        self.assertEqual(list(props.suppressions), ["Rule 1.1"])


class TestNonMisra(unittest.TestCase):

    def test_variants(self):
        grammar = AnnotationGrammar()
        for comment in ("NONMISRA", "NON_MISRA", "NON-MISRA", "x NON MISRA y"):
            self.assertTrue(grammar.parse(comment).is_non_misra, comment)
        self.assertFalse(grammar.parse("CANONMISRA").is_non_misra)


class TestFalsePositive(unittest.TestCase):

    def setUp(self):
        self.grammar = AnnotationGrammar()
        self.errors = ErrorLog()

    def test_bare_tag_applies_to_all_ids(self):
        props = self.grammar.parse(
            "FALSE_POSITIVE", id_mapper=_mapper("Rule 1.1", "Rule 2.2"), errors=self.errors)
        self.assertTrue(all(s.is_false_positive for s in props.suppressions.values()))
        self.assertFalse(self.errors)

    def test_parameterized_tag_applies_to_one_id(self):
        props = self.grammar.parse(
            "FALSE-POSITIVE(Rule 2.2)", id_mapper=_mapper("Rule 1.1", "Rule 2.2"), errors=self.errors)
        self.assertFalse(props.suppressions["Rule 1.1"].is_false_positive)
        self.assertTrue(props.suppressions["Rule 2.2"].is_false_positive)

    def test_parameterized_tag_for_unknown_id(self):
        self.grammar.parse(
            "FALSE_POSITIVE(Rule 3.3)", id_mapper=_mapper("Rule 1.1"), errors=self.errors,
            file_name="a.c")
        self.assertEqual(self.errors.code, ErrorCode.GUIDELINE_NOT_FOUND)
        self.assertIn("a.c", self.errors.messages[0])


class TestDeviation(unittest.TestCase):

    def setUp(self):
        self.grammar = AnnotationGrammar()
        self.errors = ErrorLog()

    def test_reference_only(self):
        props = self.grammar.parse("DEVIATION(DR-1)", id_mapper=_mapper("Rule 1.1"))
        s = props.suppressions["Rule 1.1"]
        self.assertTrue(s.is_deviation)
        self.assertEqual(s.deviation_reference, "DR-1")
        self.assertIsNone(s.deviation_link)

    def test_two_arguments_apply_to_all_ids(self):
        props = self.grammar.parse(
            "DEVIATION( DR-7 , https:/wiki/dr7 )", id_mapper=_mapper("Rule 1.1", "Rule 2.2"))
        for s in props.suppressions.values():
            self.assertTrue(s.is_deviation)
            self.assertEqual(s.deviation_reference, "DR-7")
            self.assertEqual(s.deviation_link, "https://wiki/dr7")

    def test_three_arguments_apply_to_one_id(self):
        props = self.grammar.parse(
            "DEVIATION(refX, http:site.com, Rule1)", id_mapper=_mapper("Rule1", "Rule2"),
            errors=self.errors)
        self.assertTrue(props.suppressions["Rule1"].is_deviation)
        self.assertEqual(props.suppressions["Rule1"].deviation_reference, "refX")
        self.assertEqual(props.suppressions["Rule1"].deviation_link, "http://site.com")
        self.assertFalse(props.suppressions["Rule2"].is_deviation)
        self.assertFalse(self.errors)

    def test_several_targeted_deviations(self):
        props = self.grammar.parse(
            "DEVIATION(a, , Rule1) DEVIATION(b, , Rule2)", id_mapper=_mapper("Rule1", "Rule2"))
        self.assertEqual(props.suppressions["Rule1"].deviation_reference, "a")
        self.assertEqual(props.suppressions["Rule2"].deviation_reference, "b")
        self.assertEqual(props.suppressions["Rule2"].deviation_link, "")

    def test_empty_reference(self):
        props = self.grammar.parse("DEVIATION(, http:x.org)", id_mapper=_mapper("Rule1"))
        s = props.suppressions["Rule1"]
        self.assertTrue(s.is_deviation)
        self.assertEqual(s.deviation_reference, "")
        self.assertEqual(s.deviation_link, "http://x.org")

    def test_targeted_deviation_for_unknown_id(self):
        self.grammar.parse(
            "DEVIATION(a, b, Rule 9.9)", id_mapper=_mapper("Rule 1.1"), errors=self.errors)
        self.assertEqual(self.errors.code, ErrorCode.GUIDELINE_NOT_FOUND)

    def test_guideline_tag_and_deviation(self):
        props = self.grammar.parse("GUIDELINE(Rule 8.7) DEVIATION(DR-3)")
        self.assertTrue(props.suppressions["Rule 8.7"].is_deviation)


class TestCustomPatterns(unittest.TestCase):

    def test_patterns_can_be_replaced(self):
        grammar = AnnotationGrammar()
        grammar.guideline_pattern = r"\bMISRA\[([^\]]*)\]"
        grammar.false_positive_pattern = r"\bFP(?:\(([^\)]*)\))?"
        props = grammar.parse("MISRA[Rule 1.1] FP")
        self.assertEqual(grammar.guideline_pattern, r"\bMISRA\[([^\]]*)\]")
        self.assertTrue(props.suppressions["Rule 1.1"].is_false_positive)


if __name__ == "__main__":
    unittest.main()
