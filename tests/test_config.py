"""Tests for configuration loading.

Run with:  python -m pytest tests/  or  python -m unittest discover tests/
"""

import io
import os
import tempfile
import unittest
import unittest.mock as mock
from pathlib import Path

from pydantic import ValidationError

from lambda_report.config import (
    DEFAULT_HOST,
    DEFAULT_PATH,
    ReporterConfig,
    coerce_config,
    load_config,
)


class TestReporterConfig(unittest.TestCase):
    def test_defaults(self):
        cfg = ReporterConfig()
        self.assertIsNone(cfg.client_id)
        self.assertEqual(cfg.host, DEFAULT_HOST)
        self.assertEqual(cfg.path, DEFAULT_PATH)
        self.assertEqual(cfg.network_timeout, 5000)
        self.assertFalse(cfg.debug)
        self.assertTrue(cfg.enabled)

    def test_timeout_seconds(self):
        self.assertEqual(ReporterConfig(network_timeout=3000).timeout_seconds, 3.0)

    def test_non_positive_timeout_rejected(self):
        with self.assertRaises(ValidationError):
            ReporterConfig(network_timeout=0)

    def test_path_gets_leading_slash(self):
        self.assertEqual(ReporterConfig(path="v0/report").path, "/v0/report")

    def test_frozen(self):
        cfg = ReporterConfig()
        with self.assertRaises(ValidationError):
            cfg.host = "other"

    def test_coerce_mapping_and_none(self):
        self.assertEqual(coerce_config({"host": "collector.example"}).host, "collector.example")
        self.assertEqual(coerce_config(None).host, DEFAULT_HOST)
        cfg = ReporterConfig(debug=True)
        self.assertIs(coerce_config(cfg), cfg)

    def test_camel_case_keys_accepted(self):
        cfg = coerce_config({
            "clientId": "abc",
            "installMethod": "layer",
            "networkTimeout": 3000,
        })
        self.assertEqual(cfg.client_id, "abc")
        self.assertEqual(cfg.install_method, "layer")
        self.assertEqual(cfg.network_timeout, 3000)

    def test_snake_case_keywords_still_accepted(self):
        cfg = ReporterConfig(client_id="abc", install_method="layer")
        self.assertEqual(cfg.client_id, "abc")
        self.assertEqual(cfg.install_method, "layer")

    def test_coerce_drops_invalid_values(self):
        with mock.patch("sys.stderr", io.StringIO()) as err:
            cfg = coerce_config({"host": "collector.example", "network_timeout": 0})
        self.assertEqual(cfg.host, "collector.example")
        self.assertEqual(cfg.network_timeout, 5000)
        self.assertIn("network_timeout", err.getvalue())

    def test_coerce_wrong_types_fall_back(self):
        with mock.patch("sys.stderr", io.StringIO()):
            cfg = coerce_config({"networkTimeout": "soon", "debug": "maybe"})
        self.assertEqual(cfg.network_timeout, 5000)
        self.assertFalse(cfg.debug)


class TestLoadConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        env = mock.patch.dict(os.environ, {}, clear=True)
        env.start()
        self.addCleanup(env.stop)

    def _write(self, text: str) -> Path:
        p = Path(self.tmp.name) / "report.yaml"
        p.write_text(text, encoding="utf-8")
        return p

    def test_no_sources_gives_defaults(self):
        cfg = load_config()
        self.assertEqual(cfg.model_dump(), ReporterConfig().model_dump())

    def test_yaml_file(self):
        p = self._write("host: collector.example\nnetwork_timeout: 3000\ndebug: true\n")
        cfg = load_config(str(p))
        self.assertEqual(cfg.host, "collector.example")
        self.assertEqual(cfg.network_timeout, 3000)
        self.assertTrue(cfg.debug)
        self.assertEqual(cfg.path, DEFAULT_PATH)

    def test_yaml_from_env_variable(self):
        p = self._write("path: /v0/report\n")
        os.environ["LAMBDA_REPORT_CONFIG"] = str(p)
        self.assertEqual(load_config().path, "/v0/report")

    def test_env_variable_pointing_nowhere_is_ignored(self):
        os.environ["LAMBDA_REPORT_CONFIG"] = str(Path(self.tmp.name) / "missing.yaml")
        self.assertEqual(load_config().host, DEFAULT_HOST)

    def test_missing_explicit_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            load_config(str(Path(self.tmp.name) / "missing.yaml"))

    def test_non_mapping_yaml_raises(self):
        p = self._write("- just\n- a list\n")
        with self.assertRaises(ValueError):
            load_config(str(p))

    def test_env_overrides_file(self):
        p = self._write("host: from-file.example\ndebug: false\n")
        os.environ.update({
            "LAMBDA_REPORT_HOST": "from-env.example",
            "LAMBDA_REPORT_DEBUG": "true",
            "LAMBDA_REPORT_NETWORK_TIMEOUT": "1500",
        })
        cfg = load_config(str(p))
        self.assertEqual(cfg.host, "from-env.example")
        self.assertTrue(cfg.debug)
        self.assertEqual(cfg.network_timeout, 1500)

    def test_clientid_wins_over_token(self):
        os.environ.update({
            "LAMBDA_REPORT_TOKEN": "token-value",
            "LAMBDA_REPORT_CLIENTID": "client-value",
        })
        self.assertEqual(load_config().client_id, "client-value")

    def test_token_used_as_client_id(self):
        os.environ["LAMBDA_REPORT_TOKEN"] = "token-value"
        self.assertEqual(load_config().client_id, "token-value")

    def test_overrides_applied_last_and_none_skipped(self):
        os.environ["LAMBDA_REPORT_HOST"] = "from-env.example"
        cfg = load_config(overrides={"host": "override.example", "path": None})
        self.assertEqual(cfg.host, "override.example")
        self.assertEqual(cfg.path, DEFAULT_PATH)


if __name__ == "__main__":
    unittest.main()
