#!/usr/bin/env python

# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  test_operations.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Test operation default arguments and parsing of gpg's diagnostic output.

"""
import unittest

import attr

from gpgpipe.exceptions import ValidationError
from gpgpipe.operations import (
    CLEARSIGN,
    DECRYPT,
    ENCRYPT,
    IMPORT,
    OPERATIONS,
    REMOVE,
    VERIFY,
    Operation,
    extract_fingerprint,
)


class TestOperation(unittest.TestCase):
    """Test Operation.build_args and the operations table."""

    def test_default_args(self):
        self.assertEqual(ENCRYPT.build_args(), ["--encrypt"])
        self.assertEqual(DECRYPT.build_args(), ["--decrypt"])
        self.assertEqual(CLEARSIGN.build_args(), ["--clearsign"])
        self.assertEqual(VERIFY.build_args(), ["--logger-fd", "1", "--verify"])
        self.assertEqual(IMPORT.build_args(), ["--logger-fd", "1", "--import"])
        self.assertEqual(
            REMOVE.build_args(),
            ["--logger-fd", "1", "--delete-secret-and-public-key"],
        )
        self.assertEqual(OPERATIONS["call"].build_args(), [])

    def test_caller_args_come_first(self):
        self.assertEqual(
            ENCRYPT.build_args(["--armor", "--recipient", "6F20F59D"]),
            ["--armor", "--recipient", "6F20F59D", "--encrypt"],
        )
        self.assertEqual(
            REMOVE.build_args(["--yes"], ["6F20F59D"]),
            [
                "--yes",
                "--logger-fd",
                "1",
                "--delete-secret-and-public-key",
                "6F20F59D",
            ],
        )

    def test_build_args_returns_new_list(self):
        """Building arguments never changes caller args or defaults."""
        caller_args = ["--armor"]
        built = ENCRYPT.build_args(caller_args)
        built.append("--sign")

        self.assertEqual(caller_args, ["--armor"])
        self.assertEqual(ENCRYPT.build_args(), ["--encrypt"])
        self.assertIsNot(ENCRYPT.build_args(), ENCRYPT.build_args())

    def test_immutable(self):
        self.assertIsInstance(ENCRYPT.default_args, tuple)
        with self.assertRaises(attr.exceptions.FrozenInstanceError):
            ENCRYPT.default_args = ("--sign",)

        with self.assertRaises(TypeError):
            OPERATIONS["encrypt"] = Operation("encrypt", ["--sign"])

    def test_invalid_args(self):
        with self.assertRaises(ValidationError):
            ENCRYPT.build_args([1])

        with self.assertRaises(ValidationError):
            REMOVE.build_args([], [None])


class TestExtractFingerprint(unittest.TestCase):
    """Test extract_fingerprint."""

    def test_first_key_wins(self):
        output = (
            "gpg: key 6F20F59D: public key \"Test <test@example.com>\""
            " imported\n"
            "gpg: key 6F20F59D: secret key imported\n"
            "gpg: key ABCDEF01: public key \"Other\" imported\n"
        )
        self.assertEqual(extract_fingerprint(output), "6F20F59D")

    def test_full_fingerprint(self):
        fingerprint = "8465A1E2E0FB2B40ADB2478E18FB3F537E0C8A17"
        self.assertEqual(
            extract_fingerprint(f"gpg: key {fingerprint}: not changed"),
            fingerprint,
        )

    def test_prefixed_key_id(self):
        """Key ids printed with '--keyid-format 0xlong' are found too."""
        self.assertEqual(
            extract_fingerprint(
                'gpg: key 0x6F20F59D42B2B5C3: public key "A" imported'
            ),
            "6F20F59D42B2B5C3",
        )

    def test_no_key(self):
        self.assertIsNone(extract_fingerprint(""))
        self.assertIsNone(extract_fingerprint("gpg: no valid OpenPGP data found."))
        self.assertIsNone(extract_fingerprint("gpg: key not found"))


if __name__ == "__main__":
    unittest.main()
