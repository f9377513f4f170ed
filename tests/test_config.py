"""
Configuration, logging setup and command line tests.
"""

import io
import logging
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from serial_obd import logger as obd_logger
from serial_obd.__main__ import main
from serial_obd.config import ReaderSettings


class TestReaderSettings(unittest.TestCase):

    def test_defaults_valid(self):
        settings = ReaderSettings()
        self.assertEqual(settings.prompt, ">")
        self.assertGreater(settings.poll_interval_ms, 0)

    def test_validation(self):
        with self.assertRaises(ValueError):
            ReaderSettings(port="")
        with self.assertRaises(ValueError):
            ReaderSettings(poll_interval_ms=0)
        with self.assertRaises(ValueError):
            ReaderSettings(prompt=">>")
        with self.assertRaises(ValueError):
            ReaderSettings(baud=-1)

    def test_from_env(self):
        env = {"SERIAL_PORT": "/dev/ttyUSB0", "POLL_INTERVAL_MS": "500", "BAUD_RATE": "38400"}
        with patch.dict(os.environ, env):
            settings = ReaderSettings.from_env()
        self.assertEqual(settings.port, "/dev/ttyUSB0")
        self.assertEqual(settings.poll_interval_ms, 500)
        self.assertEqual(settings.baud, 38400)

    def test_from_env_bad_number_falls_back(self):
        with patch.dict(os.environ, {"POLL_INTERVAL_MS": "often"}):
            self.assertEqual(ReaderSettings.from_env().poll_interval_ms, 3000)


class TestLoggingSetup(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.root = logging.getLogger()
        self.saved_handlers = list(self.root.handlers)
        self.saved_level = self.root.level
        obd_logger._INITIALIZED = False

    def tearDown(self):
        for h in list(self.root.handlers):
            self.root.removeHandler(h)
            h.close()
        for h in self.saved_handlers:
            self.root.addHandler(h)
        self.root.setLevel(self.saved_level)
        obd_logger._INITIALIZED = False
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_setup_is_idempotent(self):
        obd_logger.setup_logging(log_dir=self.temp_dir, debug=True)
        obd_logger.setup_logging(log_dir=self.temp_dir, debug=False)
        names = sorted(h.get_name() for h in self.root.handlers)
        self.assertEqual(names, ["console", "file"])
        console = next(h for h in self.root.handlers if h.get_name() == "console")
        self.assertEqual(console.level, logging.DEBUG)

    def test_file_handler_rotation(self):
        with patch.object(obd_logger.config, "LOG_BACKUP_DAYS", 3):
            obd_logger.setup_logging(log_dir=self.temp_dir)
        fh = next(h for h in self.root.handlers if h.get_name() == "file")
        self.assertEqual(fh.backupCount, 3)
        self.assertEqual(fh.level, logging.DEBUG)
        self.assertEqual(os.path.basename(fh.baseFilename), obd_logger.LOG_FILE_NAME)

    def test_get_logger(self):
        obd_logger.setup_logging(log_dir=self.temp_dir)
        self.assertEqual(obd_logger.get_logger("serial_obd.test").name, "serial_obd.test")
        self.assertEqual(obd_logger.get_logger().name, "serial_obd")


class TestCommandLine(unittest.TestCase):

    def test_list(self):
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main(["--list"]), 0)
        self.assertIn("vss", out.getvalue())
        self.assertIn("010D", out.getvalue())

    def test_no_pids(self):
        with redirect_stderr(io.StringIO()):
            self.assertEqual(main([]), 2)


if __name__ == "__main__":
    unittest.main()
