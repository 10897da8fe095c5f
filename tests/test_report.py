import json
import unittest

from rich.console import Console

from ircsleuth.core.correlation import CorrelationResult, ResultSet
from ircsleuth.core.hostmask import Sender, SenderRow
from ircsleuth.report import build_table, render_json, render_table


def _result(exhausted: bool = True) -> CorrelationResult:
    senders = ResultSet(
        [
            Sender.from_row(SenderRow(id=2, sender="[away]bob!~bob@b.example")),
            Sender.from_row(SenderRow(id=1, sender="alice!~alice@66.205.192.51", realname="Alice")),
        ]
    )
    return CorrelationResult(senders=senders, iterations=2, exhausted=exhausted)


class TestReport(unittest.TestCase):
    def test_table_has_one_row_per_sender(self) -> None:
        table = build_table(_result())
        self.assertEqual(table.row_count, 2)
        self.assertEqual(table.title, "2 query results")

    def test_table_title_notes_depth_limit(self) -> None:
        self.assertIn("depth limit", build_table(_result(exhausted=False)).title)

    def test_rendered_text_is_not_treated_as_markup(self) -> None:
        console = Console(record=True, width=200)
        render_table(_result(), console)
        text = console.export_text()
        self.assertIn("[away]bob", text)
        self.assertLess(text.index("66.205.192.51"), text.index("b.example"))

    def test_json_is_sorted_by_host(self) -> None:
        payload = json.loads(render_json(_result()))
        self.assertEqual(payload["iterations"], 2)
        self.assertTrue(payload["exhausted"])
        self.assertEqual([s["id"] for s in payload["senders"]], [1, 2])
        self.assertEqual(payload["senders"][0]["address"], "66.205.192.51")
        self.assertEqual(payload["senders"][0]["realname"], "Alice")
        self.assertIsNone(payload["senders"][1]["address"])


if __name__ == "__main__":
    unittest.main()
