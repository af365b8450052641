#!/usr/bin/env python

# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  test_log.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Test gpgpipe/log.py

"""
import logging
import unittest

import gpgpipe.log


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestGpgPipeLogger(unittest.TestCase):
    def test_set_level_verbose_or_quiet(self):
        """Test set level convenience method."""
        logger = gpgpipe.log.GpgPipeLogger("test-gpgpipe-logger")

        # Default level if verbose and quiet are false
        logger.setLevelVerboseOrQuiet(False, False)
        self.assertEqual(logger.level, logging.NOTSET)

        # INFO if verbose is true
        logger.setLevelVerboseOrQuiet(True, False)
        self.assertEqual(logger.level, logging.INFO)

        # CRITICAL if quiet is true
        logger.setLevelVerboseOrQuiet(False, True)
        self.assertEqual(logger.level, logger.QUIET)

    def test_error_stacktrace_only_in_debug(self):
        """Test that errors come with a stacktrace in DEBUG level only."""
        logger = gpgpipe.log.GpgPipeLogger("test-gpgpipe-error")

        for level, show_stacktrace in [
            (logging.DEBUG, True),
            (logging.INFO, False),
        ]:
            logger.setLevel(level)
            handler = RecordingHandler()
            logger.handlers = [handler]
            try:
                raise ValueError("foo")

            except ValueError:
                logger.error("failed")

            self.assertEqual(bool(handler.records[0].exc_info), show_stacktrace)

    def test_error_without_exception(self):
        """Errors logged outside exception handling have no traceback."""
        logger = gpgpipe.log.GpgPipeLogger("test-gpgpipe-no-exception")
        logger.setLevel(logging.DEBUG)
        handler = RecordingHandler()
        logger.handlers = [handler]

        logger.error("failed")
        self.assertFalse(handler.records[0].exc_info)

    def test_base_logger(self):
        """All library loggers inherit from the 'gpgpipe' base logger."""
        self.assertIsInstance(gpgpipe.log.LOGGER, gpgpipe.log.GpgPipeLogger)
        self.assertIs(
            logging.getLogger("gpgpipe.process").parent, gpgpipe.log.LOGGER
        )


if __name__ == "__main__":
    unittest.main()
