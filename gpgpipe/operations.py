# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  operations.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Aggregates the default gpg arguments of each operation and the patterns
  used to interpret gpg's diagnostic output.

  Caller arguments are always placed before an operation's default arguments,
  so that e.g. '--recipient' or '--default-key' precede '--encrypt' and
  '--decrypt':

    [executable] + global_args + caller_args + default_args + operands

"""
import re
import types

import attr

from gpgpipe.formats import _check_str_list


@attr.s(frozen=True)
class Operation:
    """Name and default arguments of a gpg operation."""

    name = attr.ib()
    default_args = attr.ib(converter=tuple)

    def build_args(self, args=None, operands=()):
        """Return a new argument list of caller `args`, the operation's default
        arguments and `operands` (e.g. key identifiers), in that order."""
        args = list(args or [])
        _check_str_list(args)
        _check_str_list(list(operands))
        return [*args, *self.default_args, *operands]


# gpg writes its status and diagnostics to stderr, unless told otherwise. For
# operations whose result *is* the diagnostic text we have it written to
# stdout, which is where all other operations write their output too.
LOGGER_FD_STDOUT = ("--logger-fd", "1")

CALL = Operation("call", ())
ENCRYPT = Operation("encrypt", ["--encrypt"])
DECRYPT = Operation("decrypt", ["--decrypt"])
CLEARSIGN = Operation("clearsign", ["--clearsign"])
VERIFY = Operation("verify", [*LOGGER_FD_STDOUT, "--verify"])
IMPORT = Operation("import", [*LOGGER_FD_STDOUT, "--import"])
REMOVE = Operation(
    "remove", [*LOGGER_FD_STDOUT, "--delete-secret-and-public-key"]
)

OPERATIONS = types.MappingProxyType(
    {
        op.name: op
        for op in (CALL, ENCRYPT, DECRYPT, CLEARSIGN, VERIFY, IMPORT, REMOVE)
    }
)

# e.g. 'gpg: key 6F20F59D: public key "Jane <jane@example.com>" imported', or
# 'gpg: key 0x6F20F59D42B2B5C3: ...' with '--keyid-format 0xlong'
KEY_FINGERPRINT_PATTERN = re.compile(r"key (?:0x)?([0-9A-Fa-f]+):")

# Reported, with a non-zero exit code, when re-importing a secret key
ALREADY_IN_SECRET_KEYRING = "already in secret keyring"


def extract_fingerprint(text):
    """Return the first key identifier announced as 'key <hex>:' in gpg's
    diagnostic `text`, or None."""
    match = KEY_FINGERPRINT_PATTERN.search(text)
    if match is None:
        return None

    return match.group(1)
