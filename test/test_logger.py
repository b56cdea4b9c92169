import os
import tempfile
import unittest
from pathlib import Path

from app.logger import LOG_FILE_NAME, configure_logger, logger, module_path


def announce():
    logger.info("plain")


class Widget:
    def ping(self):
        logger.info("ping")


class TestLogger(unittest.TestCase):

    def test_module_path(self):
        self.assertEqual(module_path(os.path.join("srv", "app", "lichess_tracker", "formatting.py")),
                         "lichess_tracker.formatting")
        self.assertEqual(module_path(os.path.join("srv", "launcher.py")), "launcher")

    def test_records_carry_module_and_class(self):
        with self.assertLogs("LichessDashboard", level="INFO") as logs:
            Widget().ping()
            announce()

        method_record, function_record = logs.records
        self.assertEqual(method_record.source, "test_logger.Widget")
        self.assertEqual(function_record.source, "test_logger")

    def test_configure_is_idempotent(self):
        with tempfile.TemporaryDirectory() as tmp:
            log = configure_logger("LichessDashboardTest", Path(tmp))
            try:
                again = configure_logger("LichessDashboardTest", Path(tmp))
                self.assertIs(again, log)
                self.assertEqual(len(log.handlers), 2)
                self.assertFalse(log.propagate)
                self.assertTrue((Path(tmp) / LOG_FILE_NAME).exists())
            finally:
                for handler in list(log.handlers):
                    handler.close()
                    log.removeHandler(handler)


if __name__ == '__main__':
    unittest.main()
