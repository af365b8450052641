# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  formats.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Helpers to validate API inputs.

"""
from numbers import Real

from gpgpipe.exceptions import ValidationError


def _err(arg, expected):
    return ValidationError(f"expected {expected}, got '{arg} ({type(arg)})'")


def _check_str(arg):
    if not isinstance(arg, str):
        raise _err(arg, "str")


def _check_non_empty_str(arg):
    _check_str(arg)
    if not arg:
        raise _err(arg, "non-empty str")


def _check_str_list(arg):
    """Check list (or tuple) of str, e.g. a gpg argument list."""
    if not isinstance(arg, (list, tuple)):
        raise _err(arg, "list")
    for e in arg:
        _check_str(e)


def _check_payload(arg):
    if arg is not None and not isinstance(arg, (bytes, bytearray, str)):
        raise _err(arg, "bytes or str")


def _check_timeout(arg):
    if arg is None:
        return
    if isinstance(arg, bool) or not isinstance(arg, Real) or arg <= 0:
        raise _err(arg, "positive number of seconds or None")


def _check_chunk_size(arg):
    if isinstance(arg, bool) or not isinstance(arg, int) or arg <= 0:
        raise _err(arg, "positive int")
