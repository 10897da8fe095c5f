import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from pydantic import ValidationError

from ircsleuth.app import IrcSleuthApp
from ircsleuth.config import Settings, find_config


class TestSettings(unittest.TestCase):
    def test_defaults_without_config_file(self) -> None:
        settings = Settings.load(None)
        self.assertEqual(settings.store.backend, "postgres")
        self.assertEqual(settings.store.dsn, "postgresql://quassel@localhost/quassel")
        self.assertEqual(settings.correlation.depth, 3)
        self.assertFalse(settings.correlation.subnet)
        self.assertFalse(settings.correlation.follow_idents)

    def test_load_yaml(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            db = Path(tmp) / "quassel.sqlite"
            path = Path(tmp) / "ircsleuth.yaml"
            path.write_text(
                "store:\n"
                "  backend: sqlite\n"
                f"  sqlite_path: {db}\n"
                "correlation:\n"
                "  depth: 5\n"
                "  follow_idents: true\n",
                encoding="utf-8",
            )
            settings = Settings.load(path)
        self.assertEqual(settings.store.backend, "sqlite")
        self.assertEqual(settings.store.sqlite_path, db.resolve())
        self.assertEqual(settings.correlation.depth, 5)
        self.assertTrue(settings.correlation.follow_idents)

    def test_empty_yaml_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "ircsleuth.yaml"
            path.write_text("", encoding="utf-8")
            settings = Settings.load(path)
        self.assertEqual(settings.correlation.depth, 3)

    def test_sqlite_backend_requires_path(self) -> None:
        with self.assertRaises(ValidationError):
            Settings.model_validate({"store": {"backend": "sqlite"}})

    def test_depth_must_be_positive(self) -> None:
        with self.assertRaises(ValidationError):
            Settings.model_validate({"correlation": {"depth": 0}})

    def test_unknown_backend_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings.model_validate({"store": {"backend": "mysql"}})


class TestFindConfig(unittest.TestCase):
    def test_explicit_missing_path_raises(self) -> None:
        with self.assertRaises(FileNotFoundError):
            find_config(Path("/nonexistent/ircsleuth.yaml"))

    def test_searches_current_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cwd = Path(tmp)
            with patch("ircsleuth.config.Path.cwd", return_value=cwd):
                self.assertIsNone(find_config(None))
                (cwd / "ircsleuth.yaml").write_text("{}", encoding="utf-8")
                self.assertEqual(find_config(None), cwd / "ircsleuth.yaml")


class TestCorrelationOptionsFromSettings(unittest.TestCase):
    def test_explicit_values_override_config(self) -> None:
        settings = Settings.model_validate(
            {"correlation": {"depth": 4, "subnet": True, "max_concurrent_queries": 2}}
        )
        app = IrcSleuthApp(settings)

        configured = app.correlation_options()
        self.assertEqual(configured.depth, 4)
        self.assertTrue(configured.subnet)
        self.assertEqual(configured.max_concurrent_queries, 2)

        overridden = app.correlation_options(depth=1, subnet=False, follow_idents=True)
        self.assertEqual(overridden.depth, 1)
        self.assertFalse(overridden.subnet)
        self.assertTrue(overridden.follow_idents)


if __name__ == "__main__":
    unittest.main()
