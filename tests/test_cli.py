import tempfile
import unittest
from pathlib import Path

from openpyxl import Workbook, load_workbook

from sheetdiff.cli import build_results, run


def _write(path, rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(path)


class CliTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.before = str(self.root / "march.xlsx")
        self.after = str(self.root / "april.xlsx")
        _write(self.before, [["id", "name", "salary"], ["1", "Ali", 1000], ["2", "Sara", 900], ["3", "Omar", 800]])
        _write(self.after, [["id", "name", "salary"], ["1", "Ali", 1200], ["3", "Omar", 800], ["4", "Huda", 950]])

    def tearDown(self):
        self.tmp.cleanup()

    def test_build_results(self):
        result, ordered = build_results({"key_field": "id", "sort": {"field": "name"}}, self.before, self.after)
        self.assertEqual(result.total, 3)
        self.assertEqual([d.key for d in ordered], ["1", "4", "2"])

    def test_build_results_with_search_and_exclusions(self):
        config = {"key_field": "id", "excluded_fields": ["salary"], "search": "huda"}
        result, ordered = build_results(config, self.before, self.after)
        self.assertEqual(result.total, 1)
        self.assertEqual([d.category for d in ordered], ["added"])

    def test_run_writes_workbook(self):
        out = self.root / "out" / "diff.xlsx"
        code = run([
            "--before", self.before, "--after", self.after, "--key", "id",
            "--config", str(self._config()),
            "--sort", "name", "--descending", "--out", str(out),
        ])
        self.assertEqual(code, 0)
        rows = [list(r) for r in load_workbook(out)["Results"].iter_rows(values_only=True)]
        self.assertEqual([r[0] for r in rows], ["Status", "Removed", "Added", "Changed", "Change details"])
        self.assertEqual(rows[1][1], "2")

    def test_run_rejects_unknown_key(self):
        with self.assertRaises(SystemExit) as ctx, self.assertLogs("sheetdiff.cli", level="ERROR"):
            run(["--before", self.before, "--after", self.after, "--key", "employee",
                 "--config", str(self._config()), "--out", str(self.root / "x.xlsx")])
        self.assertEqual(ctx.exception.code, 2)

    def test_run_with_exclude_search_and_sheets(self):
        wb = Workbook()
        wb.active.append(["id"])
        other = wb.create_sheet("Staff")
        for row in [["id", "name", "salary"], ["1", "Ali", 1000], ["3", "Omar", 700]]:
            other.append(row)
        before = str(self.root / "book.xlsx")
        wb.save(before)
        out = self.root / "excluded.xlsx"
        code = run([
            "--before", before, "--after", self.after, "--key", "id", "--config", str(self._config()),
            "--sheet-before", "Staff", "--exclude", "salary", "--search", "ali", "--out", str(out),
        ])
        self.assertEqual(code, 0)
        rows = [list(r) for r in load_workbook(out)["Results"].iter_rows(values_only=True)]
        self.assertEqual(rows, [["Status", "id"]])

        code = run([
            "--before", before, "--after", self.after, "--key", "id", "--config", str(self._config()),
            "--sheet-before", "Staff", "--exclude", "salary", "--out", str(out),
        ])
        rows = [list(r)[:2] for r in load_workbook(out)["Results"].iter_rows(values_only=True)]
        self.assertEqual(rows, [["Status", "id"], ["Added", "4"]])

    def test_header_only_before_marks_all_added(self):
        before = self.root / "empty.csv"
        before.write_text("id,name\n", encoding="utf-8")
        result, ordered = build_results({"key_field": "id"}, str(before), self.after)
        self.assertEqual([d.key for d in result.added], ["1", "3", "4"])
        self.assertEqual((result.removed, result.changed, result.total), ([], [], 3))
        self.assertEqual({d.category for d in ordered}, {"added"})

    def _config(self):
        path = self.root / "config.yaml"
        path.write_text("excluded_fields: []\n", encoding="utf-8")
        return path


if __name__ == "__main__":
    unittest.main()
