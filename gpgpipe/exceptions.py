# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  exceptions.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Define Exceptions raised by gpgpipe. Following the practice from
  securesystemslib the names chosen for exception classes end in 'Error'.

  All errors derive from `gpgpipe.exceptions.Error`, which itself is a
  `securesystemslib.exceptions.Error`.

"""
from securesystemslib.exceptions import Error as _SSLibError
from securesystemslib.exceptions import FormatError


class Error(_SSLibError):
    """Base class for all gpgpipe errors."""


class ValidationError(Error, FormatError):
    """Indicates that an argument passed to gpgpipe has the wrong shape, e.g.
    a missing 'source' or a non-string in an argument list."""


class SpawnError(Error):
    """Indicates that the gpg executable could not be started."""

    def __init__(self, cmd, reason):
        self.cmd = cmd
        self.reason = reason
        super().__init__(f"Failed to run '{cmd[0]}': {reason}")


class ProcessError(Error):
    """Indicates that gpg exited with a non-zero return code.

    The message is what gpg wrote to stderr, or what it wrote to stdout if
    stderr was empty, which is the case for operations that redirect their
    diagnostics with '--logger-fd 1'.
    """

    def __init__(self, cmd, returncode, stdout=b"", stderr=""):
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(stderr or stdout.decode("utf-8", errors="replace"))


class InvocationTimeoutError(Error):
    """Indicates that gpg did not exit within the configured timeout and was
    killed."""

    def __init__(self, cmd, timeout):
        self.cmd = cmd
        self.timeout = timeout
        super().__init__(f"'{cmd[0]}' timed out after {timeout} seconds")


class StreamSourceError(Error):
    """Indicates that the source of a streaming invocation does not exist or
    cannot be opened for reading."""


class StreamDestinationError(Error):
    """Indicates that the destination of a streaming invocation cannot be
    opened for writing."""
