# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  log.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Configures the "gpgpipe" base logger, which all gpgpipe modules log to.

  What is logged, and at which level:

  - DEBUG: every gpg command line before it is spawned and gpg's return
    code, by `gpgpipe.process`, and gpg closing stdin early while a source
    is still pumped.
  - INFO: the effective value and origin (user or default) of each setting,
    by `gpgpipe.user_settings`, ignored "already in secret keyring" import
    failures, by `gpgpipe.functions`, and imported key fingerprints, by the
    command line interface.
  - WARNING and above: user feedback of the command line interface, e.g. a
    key that was already present, or the error that made it exit with 1.

  gpg's own diagnostics are never logged. They are returned on the
  InvocationResult, or carried by the raised ProcessError.

  The base logger writes to 'sys.stderr', so that it never mixes with gpg
  output the command line interface streams to 'sys.stdout'. By default only
  warnings and errors are shown, message only. If `gpgpipe.settings.DEBUG` is
  True when this module is first imported, all levels are shown, prefixed with logger name,
  line and level, and errors logged while an exception is handled include
  its traceback.

<Usage>
  The command line interface maps its '-v' and '-q' flags onto the base
  logger:

  ```
  LOG = logging.getLogger("gpgpipe")
  LOG.setLevelVerboseOrQuiet(args.verbose, args.quiet)
  ```

  Library users that embed gpgpipe configure the "gpgpipe" logger like any
  other, e.g. `logging.getLogger("gpgpipe").setLevel(logging.DEBUG)` to
  trace gpg invocations:

  ```
  gpgpipe.process:139:DEBUG:Running 'gpg --batch --homedir /tmp/h --decrypt'...
  gpgpipe.process:183:DEBUG:'gpg' exited with return code 0
  ```

"""
import logging
import sys

import gpgpipe.settings

FORMAT_MESSAGE = "%(message)s"
FORMAT_DEBUG = "%(name)s:%(lineno)d:%(levelname)s:%(message)s"

# Cache default logger class, should be logging.Logger if not changed elsewhere
_LOGGER_CLASS = logging.getLoggerClass()


class GpgPipeLogger(_LOGGER_CLASS):
    """Base logger of gpgpipe, with tracebacks on errors in DEBUG level and
    the verbosity switch of the command line interface."""

    # Above CRITICAL, i.e. '-q' silences even the error that exits the cli
    QUIET = logging.CRITICAL + 1

    def error(self, msg, *args, **kwargs):
        """Log `msg`, with the traceback of the exception being handled, if
        any, but only in DEBUG level."""
        handling = sys.exc_info()[0] is not None
        kwargs.setdefault("exc_info", handling and self.level == logging.DEBUG)
        return super().error(msg, *args, **kwargs)

    # Allow non snake_case function name for consistency with logging library
    def setLevelVerboseOrQuiet(
        self, verbose, quiet
    ):  # pylint: disable=invalid-name
        """Lower the level to INFO for '--verbose', raise it to QUIET for
        '--quiet', and keep it otherwise."""
        if verbose:
            self.setLevel(logging.INFO)

        elif quiet:
            self.setLevel(self.QUIET)


# Only "gpgpipe" itself is a GpgPipeLogger, module loggers stay plain
logging.setLoggerClass(GpgPipeLogger)
LOGGER = logging.getLogger("gpgpipe")
logging.setLoggerClass(_LOGGER_CLASS)

if gpgpipe.settings.DEBUG:  # pragma: no cover
    LEVEL = logging.DEBUG
    FORMAT_STRING = FORMAT_DEBUG

else:
    LEVEL = logging.WARNING
    FORMAT_STRING = FORMAT_MESSAGE

# stderr, stdout may carry gpg output
FORMATTER = logging.Formatter(FORMAT_STRING)
HANDLER = logging.StreamHandler(sys.stderr)
HANDLER.setFormatter(FORMATTER)
LOGGER.addHandler(HANDLER)
LOGGER.setLevel(LEVEL)
