from __future__ import annotations

import json
import logging
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from awesometrack.util.logging import configure_logging
from awesometrack.util.manifest import read_db_meta, read_json_file, write_json_file, write_manifest


class LoggingManifestTests(unittest.TestCase):
    def test_configure_logging_creates_handlers(self) -> None:
        with TemporaryDirectory() as tmpdir:
            log_path = Path(tmpdir) / "awesometrack.log"
            logger = configure_logging(log_path=log_path, level=logging.DEBUG)
            try:
                logging.getLogger("awesometrack.io.cache").debug("cache hello")
                self.assertEqual(logger.level, logging.DEBUG)
                self.assertTrue(log_path.exists())
                contents = log_path.read_text(encoding="utf-8")
                self.assertIn("cache hello", contents)
                self.assertIn("awesometrack.io.cache", contents)

                configure_logging(log_path=log_path)
                file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
                self.assertEqual(len(file_handlers), 1)
            finally:
                for handler in list(logger.handlers):
                    handler.close()
                    logger.removeHandler(handler)

    def test_write_manifest(self) -> None:
        with TemporaryDirectory() as tmpdir:
            dest = write_manifest({"status": "ok", "count": 1}, root=Path(tmpdir))

            self.assertTrue(dest.exists())
            self.assertEqual(dest.parent, Path(tmpdir) / "logs" / "run_manifests")
            payload = json.loads(dest.read_text(encoding="utf-8"))
            self.assertEqual(payload["status"], "ok")
            self.assertEqual(payload["count"], 1)
            self.assertIn("run_", dest.name)

    def test_json_round_trip_and_db_meta(self) -> None:
        with TemporaryDirectory() as tmpdir:
            meta_path = Path(tmpdir) / "db" / "meta.json"
            self.assertEqual(read_db_meta(meta_path), {"sources": {}})

            write_json_file(meta_path, {"sources": {"a/b": {"updated_at": "2024-01-01"}}})
            self.assertTrue(meta_path.read_text(encoding="utf-8").endswith("}\n"))
            self.assertEqual(read_json_file(meta_path)["sources"]["a/b"]["updated_at"], "2024-01-01")

            write_json_file(meta_path, {"version": 2})
            self.assertEqual(read_db_meta(meta_path), {"version": 2, "sources": {}})

            write_json_file(meta_path, ["not", "an", "object"])
            with self.assertRaises(ValueError):
                read_db_meta(meta_path)


if __name__ == "__main__":
    unittest.main()
