import io
import tempfile
import unittest
from pathlib import Path

from openpyxl import load_workbook

from sheetdiff.compare import compare_datasets
from sheetdiff.export_excel import result_columns, write_workbook

BEFORE = [
    {"id": "1", "name": "Ali", "salary": "1000"},
    {"id": "3", "name": "Omar", "salary": "700"},
]
AFTER = [
    {"id": "1", "name": "Ali", "salary": "1200"},
    {"id": "2", "name": "Sara", "salary": "900"},
]


class ExportTests(unittest.TestCase):
    def setUp(self):
        self.result = compare_datasets(BEFORE, AFTER, "id")
        self.tmp = tempfile.TemporaryDirectory()
        self.path = str(Path(self.tmp.name) / "out.xlsx")

    def tearDown(self):
        self.tmp.cleanup()

    def test_result_columns_skip_key(self):
        self.assertEqual(result_columns(self.result.all_differences(), "id"), ["name", "salary"])

    def test_results_sheet(self):
        write_workbook(self.path, self.result.all_differences(), "id")
        wb = load_workbook(self.path)
        self.assertEqual(wb.sheetnames, ["Results", "Summary"])
        rows = [list(r) for r in wb["Results"].iter_rows(values_only=True)]
        self.assertEqual(rows[0], ["Status", "id", "name", "salary"])
        self.assertEqual(rows[1], ["Added", "2", "Sara", "900"])
        self.assertEqual(rows[2], ["Removed", "3", "Omar", "700"])
        self.assertEqual(rows[3], ["Changed", "1", "Ali", "1200"])
        self.assertEqual(rows[4], ["Change details", None, None, "From: 1000 → To: 1200"])
        self.assertEqual(wb["Results"].freeze_panes, "A2")

    def test_summary_sheet_and_labels(self):
        labels = {"added": "New", "removed": "Gone", "changed": "Edited", "status": "State"}
        write_workbook(self.path, self.result.all_differences(), "id", labels)
        wb = load_workbook(self.path)
        rows = [list(r) for r in wb["Summary"].iter_rows(values_only=True)]
        self.assertEqual(rows, [["State", "Count"], ["New", 1], ["Gone", 1], ["Edited", 1], ["Total", 3]])
        self.assertEqual(wb["Results"]["A2"].value, "New")

    def test_control_characters_are_stripped(self):
        result = compare_datasets([{"id": "1", "name": "Ali"}], [{"id": "1", "name": "A\x01li\x0b"}, {"id": "2\x02", "name": "Sa\x1fra"}], "id")
        write_workbook(self.path, result.all_differences(), "id")
        rows = [list(r) for r in load_workbook(self.path)["Results"].iter_rows(values_only=True)]
        self.assertEqual(rows[1], ["Added", "2", "Sara"])
        self.assertEqual(rows[2], ["Changed", "1", "Ali"])
        self.assertEqual(rows[3], ["Change details", None, "From: Ali → To: Ali"])

    def test_writes_to_buffer(self):
        buffer = io.BytesIO()
        write_workbook(buffer, [], "id")
        wb = load_workbook(io.BytesIO(buffer.getvalue()))
        self.assertEqual([c.value for c in wb["Results"][1]], ["Status", "id"])


if __name__ == "__main__":
    unittest.main()
