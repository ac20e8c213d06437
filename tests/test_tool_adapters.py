"""
Tool adapters: warning line parsing, suppression comment discovery and
comment → guideline mapping for Cppcheck, PC-lint and Axivion.
"""

import json
import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from misra_gcs.axivion_adapter import AxivionAdapter, to_guideline_id
from misra_gcs.comment_scanner import scan_comments
from misra_gcs.cppcheck_adapter import CppcheckAdapter
from misra_gcs.guideline_catalog import MisraVersion
from misra_gcs.pclint_adapter import PcLintAdapter, build_error_map
from misra_gcs.tool_adapter import ToolAdapter, available_adapters, get_adapter

SOURCE = """\
#include <stdint.h>
/* file header */
static const char *s = "// cppcheck-suppress misra-c2012-1.1";

int f(int a) // cppcheck-suppress misra-c2012-10.4
{
    /* cppcheck-suppress misra-c2012-11.3 ; DEVIATION(DR-12) */
    return a; // plain comment
}
"""


class TestCommentScanner(unittest.TestCase):

    def test_comments_in_order_without_string_literals(self):
        comments = scan_comments(SOURCE)
        bodies = [c.body for c in comments]
        self.assertEqual(bodies, [
            " file header ",
            " cppcheck-suppress misra-c2012-10.4",
            " cppcheck-suppress misra-c2012-11.3 ; DEVIATION(DR-12) ",
            " plain comment",
        ])
        self.assertTrue(comments[0].is_block)
        self.assertFalse(comments[1].is_block)

    def test_offsets_point_at_the_bodies(self):
        for comment in scan_comments(SOURCE):
            self.assertEqual(SOURCE[comment.offset:comment.offset + len(comment.body)], comment.body)

    def test_offsets_count_characters_not_bytes(self):
        source = "/* Stra\u00dfe \u00e9t\u00e9 */\nint a; // tail\n"
        tail = scan_comments(source)[1]
        self.assertEqual(tail.offset, source.index(" tail"))
        self.assertEqual(tail.text(1).offset, source.index("tail"))

    def test_empty_source(self):
        self.assertEqual(scan_comments(""), [])


class TestCppcheckAdapter(unittest.TestCase):

    def setUp(self):
        self.adapter = CppcheckAdapter()

    def test_parse_warning_line(self):
        line = "[src/main.c:42] (style) misra violation (use --rule-texts=<file>) [misra-c2012-10.4]"
        violations = self.adapter.parse_warning_line(line)
        self.assertEqual(len(violations), 1)
        self.assertEqual(violations[0].file_name, "src/main.c")
        self.assertEqual(violations[0].line_number, 42)
        self.assertEqual(violations[0].guideline_id, "Rule 10.4")

    def test_unrelated_lines(self):
        self.assertEqual(self.adapter.parse_warning_line("Checking src/main.c ..."), [])
        self.assertEqual(self.adapter.parse_warning_line(""), [])

    def test_find_suppression_comments(self):
        self.assertEqual(self.adapter.find_suppression_comments(SOURCE), [
            " cppcheck-suppress misra-c2012-10.4",
            " cppcheck-suppress misra-c2012-11.3 ; DEVIATION(DR-12) ",
        ])

    def test_guideline_ids(self):
        self.assertEqual(
            self.adapter.guideline_ids_from_comment(" cppcheck-suppress misra-c2012-11.3"),
            ["Rule 11.3"])
        self.assertEqual(self.adapter.guideline_ids_from_comment(" cppcheck-suppress nullPointer"), [])

    def test_versions(self):
        self.assertEqual(self.adapter.supported_versions(), {MisraVersion.C_2012})


class TestPcLintAdapter(unittest.TestCase):

    def setUp(self):
        self.adapter = PcLintAdapter()
        self.adapter.on_version_selected(MisraVersion.C_2012)

    def test_error_map(self):
        self.assertEqual(self.adapter.error_map[9029], ["Rule 10.4"])
        self.assertEqual(self.adapter.error_map[602], ["Directive 4.4", "Rule 3.1"])
        self.assertEqual(
            build_error_map("-append(5,[MISRA 2004 Rule 1.2, required])\n"
                            "-append(5,[MISRA 2004 Rule 3.4, advisory])"),
            {5: ["Rule 1.2", "Rule 3.4"]})

    def test_parse_warning_line(self):
        line = ("src/main.c(42): Note 9029: Mismatched essential type categories "
                "[MISRA 2012 Rule 10.4, required]")
        violations = self.adapter.parse_warning_line(line)
        self.assertEqual([(v.file_name, v.line_number, v.guideline_id) for v in violations],
                         [("src/main.c", 42, "Rule 10.4")])

    def test_parse_warning_line_with_several_guidelines(self):
        line = ("a.c(7): Warning 586: function 'malloc' is deprecated "
                "[MISRA 2012 Rule 21.3, required] [MISRA 2012 Directive 4.12, required]")
        ids = [v.guideline_id for v in self.adapter.parse_warning_line(line)]
        self.assertEqual(ids, ["Rule 21.3", "Directive 4.12"])

    def test_unrelated_line(self):
        self.assertEqual(self.adapter.parse_warning_line("--- Module: a.c (C)"), [])

    def test_find_suppression_comments(self):
        text = "int a; //lint -e9029\n/*lint -esym(9003, counter) !e534 */\n// lint later\n"
        self.assertEqual(self.adapter.find_suppression_comments(text),
                         ["-e9029", "-esym(9003, counter) !e534 "])
        for comment in self.adapter.find_suppression_comments(text):
            self.assertEqual(text[comment.offset:comment.offset + len(comment)], comment)

    def test_guideline_ids_from_options(self):
        self.assertEqual(self.adapter.guideline_ids_from_comment("-e9029"), ["Rule 10.4"])
        self.assertEqual(
            self.adapter.guideline_ids_from_comment("-esym(9003, counter) !e534 "),
            ["Rule 8.9", "Rule 17.7"])

    def test_unknown_error_number(self):
        self.assertIsNone(self.adapter.guideline_ids_from_comment("-e9029 -e1"))

    def test_tagged_text_after_options(self):
        self.assertEqual(
            self.adapter.guideline_ids_from_comment("-e9029 FALSE_POSITIVE"), ["Rule 10.4"])

    def test_knows_all_versions(self):
        self.assertEqual(self.adapter.supported_versions(), set(MisraVersion))


class TestAxivionAdapter(unittest.TestCase):

    def setUp(self):
        self.adapter = AxivionAdapter()

    def test_rule_id_mapping(self):
        self.assertEqual(to_guideline_id("MisraC2012-10.4"), "Rule 10.4")
        self.assertEqual(to_guideline_id("MisraC2012Directive-4.1"), "Directive 4.1")
        self.assertIsNone(to_guideline_id("CertC-EXP34"))

    def test_json_line_nested_location(self):
        line = json.dumps({
            "ruleId": "MisraC2012-8.13",
            "message": "pointer should point to const",
            "location": {"path": "src/a.c", "startLine": 12},
        })
        violations = self.adapter.parse_warning_line(line)
        self.assertEqual([(v.file_name, v.line_number, v.guideline_id) for v in violations],
                         [("src/a.c", 12, "Rule 8.13")])

    def test_json_line_flat_fields(self):
        line = json.dumps({"rule": "MisraC2012Directive-4.6", "file": "b.c", "line": "3"})
        violations = self.adapter.parse_warning_line(line)
        self.assertEqual(violations[0].guideline_id, "Directive 4.6")
        self.assertEqual(violations[0].line_number, 3)

    def test_malformed_json_and_foreign_rules(self):
        self.assertEqual(self.adapter.parse_warning_line("{not json"), [])
        self.assertEqual(self.adapter.parse_warning_line(json.dumps({"ruleId": "CertC-1"})), [])

    def test_text_line(self):
        line = "src/main.c:42:7: warning: MisraC2012-10.4 essential type mismatch"
        violations = self.adapter.parse_warning_line(line)
        self.assertEqual([(v.file_name, v.line_number, v.guideline_id) for v in violations],
                         [("src/main.c", 42, "Rule 10.4")])

    def test_find_suppression_comments(self):
        text = (
            "// AXIVION Next Line MisraC2012-10.4: DEVIATION(DR-7)\n"
            "int x = 1;\n"
            "/* AXIVION DISABLE STYLE MisraC2012-15.5 */\n"
            "/* AXIVION ENABLE STYLE MisraC2012-15.5 */\n"
            "// not an axivion comment\n"
        )
        self.assertEqual(self.adapter.find_suppression_comments(text), [
            " AXIVION Next Line MisraC2012-10.4: DEVIATION(DR-7)",
            " AXIVION DISABLE STYLE MisraC2012-15.5 ",
        ])

    def test_guideline_ids(self):
        self.assertEqual(
            self.adapter.guideline_ids_from_comment(
                " AXIVION Routine MisraC2012-15.5 MisraC2012Directive-4.1 MisraC2012-15.5"),
            ["Rule 15.5", "Directive 4.1"])


class TestRegistry(unittest.TestCase):

    def test_builtin_adapters(self):
        self.assertEqual(available_adapters(), ["Axivion", "Cppcheck", "PC-Lint"])
        self.assertIsInstance(get_adapter("Cppcheck"), CppcheckAdapter)
        self.assertIsInstance(get_adapter("PC-Lint"), PcLintAdapter)

    def test_fresh_instances(self):
        self.assertIsNot(get_adapter("PC-Lint"), get_adapter("PC-Lint"))

    def test_unknown_tool(self):
        with self.assertRaises(KeyError) as ctx:
            get_adapter("Lint-O-Matic")
        self.assertIn("Cppcheck", str(ctx.exception))

    def test_default_mapper_cannot_determine(self):
        class Minimal(ToolAdapter):
            def parse_warning_line(self, line):
                return []

            def find_suppression_comments(self, file_text):
                return []

            def name(self):
                return "Minimal"

        adapter = Minimal()
        self.assertIsNone(adapter.guideline_ids_from_comment("anything"))
        self.assertEqual(adapter.supported_versions(), set(MisraVersion))


if __name__ == "__main__":
    unittest.main()
