import io
import json
import logging
import sqlite3
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

from ircsleuth import cli


def _write_sqlite_config(tmp: Path) -> Path:
    db = tmp / "quassel.sqlite"
    conn = sqlite3.connect(db)
    try:
        conn.execute(
            "CREATE TABLE sender (senderid INTEGER PRIMARY KEY, sender TEXT NOT NULL, realname TEXT)"
        )
        conn.executemany(
            "INSERT INTO sender(senderid, sender, realname) VALUES(?, ?, ?)",
            [
                (1, "kks!~kks@user/kks", None),
                (2, "kks_!~kks@87-248-67-133.promax.media.pl", None),
                (3, "other!~o@87.248.67.9", None),
            ],
        )
        conn.commit()
    finally:
        conn.close()
    config = tmp / "ircsleuth.yaml"
    config.write_text(f"store:\n  backend: sqlite\n  sqlite_path: {db}\n", encoding="utf-8")
    return config


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self._cwd = patch("ircsleuth.cli.Path.cwd", return_value=self.tmp)
        self._cwd.start()

    def tearDown(self) -> None:
        self._cwd.stop()
        root = logging.getLogger()
        for handler in list(root.handlers):
            handler.close()
            root.removeHandler(handler)
        self._tmp.cleanup()

    def _main(self, *argv: str) -> tuple[str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            cli.main(list(argv))
        return out.getvalue(), err.getvalue()

    def test_inspect_prints_patterns(self) -> None:
        out, _ = self._main("inspect", "bob!~bob@static-ip-87-248-67-133.promax.media.pl", "-s")
        self.assertIn("Address: IPv4 87.248.67.133", out)
        self.assertIn("nick pattern:  bob%", out)
        self.assertIn("ident pattern: %~bob%", out)
        self.assertIn("host pattern:  %87_248_67%", out)

    def test_invalid_mask_exits_before_any_query(self) -> None:
        with patch("ircsleuth.app.IrcSleuthApp.correlate") as correlate:
            with self.assertRaises(SystemExit) as ctx:
                self._main("correlate", "no-delimiters-here")
        self.assertEqual(ctx.exception.code, 2)
        correlate.assert_not_called()

    def test_depth_must_be_positive(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._main("correlate", "a!b@c", "--depth", "0")
        self.assertEqual(ctx.exception.code, 2)

    def test_correlate_json_against_sqlite(self) -> None:
        config = _write_sqlite_config(self.tmp)
        out, _ = self._main(
            "--config", str(config), "--log-level", "WARNING", "correlate", "kks!~kks@user/kks", "--json"
        )
        payload = json.loads(out)
        self.assertEqual({s["id"] for s in payload["senders"]}, {1, 2})
        self.assertTrue(payload["exhausted"])

    def test_correlate_with_subnet_flag(self) -> None:
        config = _write_sqlite_config(self.tmp)
        out, _ = self._main(
            "--config",
            str(config),
            "--log-level",
            "WARNING",
            "correlate",
            "kks!~kks@user/kks",
            "--subnet",
            "--json",
        )
        payload = json.loads(out)
        self.assertEqual({s["id"] for s in payload["senders"]}, {1, 2, 3})

    def test_no_subnet_overrides_config(self) -> None:
        config = _write_sqlite_config(self.tmp)
        with config.open("a", encoding="utf-8") as fh:
            fh.write("correlation:\n  subnet: true\n  follow_idents: true\n")

        out, _ = self._main(
            "--config", str(config), "--log-level", "WARNING", "correlate", "kks!~kks@user/kks", "--json"
        )
        self.assertEqual({s["id"] for s in json.loads(out)["senders"]}, {1, 2, 3})

        out, _ = self._main(
            "--config",
            str(config),
            "--log-level",
            "WARNING",
            "correlate",
            "kks!~kks@user/kks",
            "--no-subnet",
            "--no-ident",
            "--json",
        )
        self.assertEqual({s["id"] for s in json.loads(out)["senders"]}, {1, 2})

    def test_correlate_missing_database_exits(self) -> None:
        config = self.tmp / "ircsleuth.yaml"
        config.write_text(
            f"store:\n  backend: sqlite\n  sqlite_path: {self.tmp / 'missing.sqlite'}\n",
            encoding="utf-8",
        )
        with self.assertRaises(SystemExit) as ctx:
            self._main("--config", str(config), "correlate", "a!b@c")
        self.assertIn("missing.sqlite", str(ctx.exception.code))

    def test_doctor_reports_sender_count(self) -> None:
        config = _write_sqlite_config(self.tmp)
        out, _ = self._main("--config", str(config), "doctor")
        self.assertIn("Store: OK", out)
        self.assertIn("3 senders", out)

    def test_doctor_fails_without_database(self) -> None:
        config = self.tmp / "ircsleuth.yaml"
        config.write_text(
            f"store:\n  backend: sqlite\n  sqlite_path: {self.tmp / 'missing.sqlite'}\n",
            encoding="utf-8",
        )
        with self.assertRaises(SystemExit) as ctx:
            self._main("--config", str(config), "doctor")
        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
