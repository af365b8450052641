#!/usr/bin/env python

# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  common.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Common code for gpgpipe unittests, import like so:
  `import tests.common`

  Tests importing this module, should be run from the project root, e.g.:
  `python -m unittest tests.test_process`
  or using the aggregator script (preferred way):
  `python -m tests.runtests`.

"""
import inspect
import os
import shutil
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import gpgpipe.settings

SCRIPTS = Path(__file__).parent / "scripts"
KEYS = Path(__file__).parent / "keys"

# Tests that need a real gpg are skipped without one, or if TEST_SKIP_GPG is set
SKIP_GPG = bool(os.getenv("TEST_SKIP_GPG")) or not shutil.which("gpg")


class TmpDirMixin:
    """Mixin with classmethods to create and change into a temporary directory,
    and to change back to the original CWD and remove the temporary directory.

    """

    @classmethod
    def set_up_test_dir(cls):
        """Back up CWD, and create and change into temporary directory."""
        cls.original_cwd = os.getcwd()
        cls.test_dir = os.path.realpath(tempfile.mkdtemp())
        os.chdir(cls.test_dir)

    @classmethod
    def tear_down_test_dir(cls):
        """Change back to original CWD and remove temporary directory."""
        os.chdir(cls.original_cwd)
        shutil.rmtree(cls.test_dir)


class FakeGPGMixin:
    """Mixin with classmethods to install the fake gpg script (see
    tests/scripts/fake_gpg.py) as executable in a temporary directory, and to
    make it, together with a fresh GPG home directory, the default in
    `gpgpipe.settings`.

    """

    key_id = "6F20F59D"
    public_key_path = str(KEYS / "test.pub.asc")
    secret_key_path = str(KEYS / "test.sec.asc")

    @classmethod
    def set_up_fake_gpg(cls):
        cls.fake_gpg_dir = os.path.realpath(tempfile.mkdtemp())
        cls.gpg_home = os.path.join(cls.fake_gpg_dir, "home")
        os.mkdir(cls.gpg_home)

        # Use the running interpreter, so that the script can be spawned
        # like any other executable
        cls.gpg_command = os.path.join(cls.fake_gpg_dir, "gpg")
        with open(SCRIPTS / "fake_gpg.py", encoding="utf-8") as src, open(
            cls.gpg_command, "w", encoding="utf-8"
        ) as dst:
            dst.write(f"#!{sys.executable}\n")
            dst.write(src.read())
        os.chmod(cls.gpg_command, 0o755)

        cls.settings_backup = {
            "GPG_COMMAND": gpgpipe.settings.GPG_COMMAND,
            "GPG_GLOBAL_ARGS": gpgpipe.settings.GPG_GLOBAL_ARGS,
        }
        gpgpipe.settings.GPG_COMMAND = cls.gpg_command
        gpgpipe.settings.GPG_GLOBAL_ARGS = [
            "--batch",
            "--homedir",
            cls.gpg_home,
        ]

    @classmethod
    def tear_down_fake_gpg(cls):
        for key, value in cls.settings_backup.items():
            setattr(gpgpipe.settings, key, value)
        shutil.rmtree(cls.fake_gpg_dir)

    def reset_keyring(self):
        """Remove all keys imported by previous tests."""
        keyring = os.path.join(self.gpg_home, "fake-keyring.json")
        if os.path.exists(keyring):
            os.remove(keyring)


class GPGMixin:
    """Mixin with classmethods to create a GPG home directory with a freshly
    generated, passphrase-less key, make the installed gpg and that home
    directory the default in `gpgpipe.settings`, and to clean up afterwards.

    Tests using it should be skipped if gpg is not available, e.g.:

    ```
    @unittest.skipIf(SKIP_GPG, "gpg not found")
    ```
    """

    gpg_command = "gpg"
    user_id = "Test <test@example.com>"

    @classmethod
    def gpg(cls, *args, gpg_home=None):
        """Run gpg synchronously in `gpg_home` and return its stdout."""
        cmd = [cls.gpg_command, "--batch", "--homedir", gpg_home or cls.gpg_home]
        cmd += ["--pinentry-mode", "loopback", "--passphrase", ""]
        return subprocess.run(
            cmd + list(args), check=True, stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        ).stdout

    @classmethod
    def make_gpg_home(cls):
        gpg_home = tempfile.mkdtemp()
        os.chmod(gpg_home, 0o700)
        return gpg_home

    @classmethod
    def set_up_gpg(cls):
        cls.gpg_home = cls.make_gpg_home()
        cls.gpg(
            "--quick-generate-key", cls.user_id, "default", "default", "never"
        )

        # First 'fpr' record of the colon listing is the primary key's
        listing = cls.gpg("--with-colons", "--list-secret-keys").decode()
        cls.fingerprint = next(
            line.split(":")[9]
            for line in listing.splitlines()
            if line.startswith("fpr:")
        )
        cls.public_key = cls.gpg("--armor", "--export", cls.fingerprint)
        cls.secret_key = cls.gpg(
            "--armor", "--export-secret-keys", cls.fingerprint
        )

        cls.settings_backup = {
            "GPG_COMMAND": gpgpipe.settings.GPG_COMMAND,
            "GPG_GLOBAL_ARGS": gpgpipe.settings.GPG_GLOBAL_ARGS,
        }
        gpgpipe.settings.GPG_COMMAND = cls.gpg_command
        gpgpipe.settings.GPG_GLOBAL_ARGS = ["--batch", "--homedir", cls.gpg_home]

    @classmethod
    def remove_gpg_home(cls, gpg_home):
        """Stop the agent gpg started for `gpg_home` and remove it."""
        if shutil.which("gpgconf"):
            subprocess.run(
                ["gpgconf", "--homedir", gpg_home, "--kill", "all"],
                check=False, stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        shutil.rmtree(gpg_home, ignore_errors=True)

    @classmethod
    def tear_down_gpg(cls):
        for key, value in cls.settings_backup.items():
            setattr(gpgpipe.settings, key, value)
        cls.remove_gpg_home(cls.gpg_home)


class CliTestCase(unittest.TestCase):
    """TestCase subclass providing a test helper that patches sys.argv with
    passed arguments and asserts a SystemExit with a return code equal
    to the passed status argument.

    Subclasses of CliTestCase require a class variable that stores the main
    function of the cli tool to test as staticmethod, e.g.:

    ```
    import tests.common
    from gpgpipe.gpgpipe_cli import main as gpgpipe_main

    class TestGpgPipeTool(tests.common.CliTestCase):
      cli_main_func = staticmethod(gpgpipe_main)
      ...

    ```
    """

    cli_main_func = None

    def __init__(self, *args, **kwargs):
        """Constructor that checks for the presence of a callable cli_main_func
        class variable. And stores the filename of the module containing that
        function, to be used as first argument when patching sys.argv in
        self.assert_cli_sys_exit.
        """
        if not callable(self.cli_main_func):
            raise Exception(  # pylint: disable=broad-exception-raised
                "Subclasses of `CliTestCase` need to assign the main"
                " function of the cli tool to test using `staticmethod()`: {}".format(
                    self.__class__.__name__
                )
            )

        file_path = inspect.getmodule(self.cli_main_func).__file__
        self.file_name = os.path.basename(file_path)

        super().__init__(*args, **kwargs)

    def assert_cli_sys_exit(self, cli_args, status):
        """Test helper to mock command line call and assert return value.
        The passed args does not need to contain the command line tool's name.
        This is assessed from  `self.cli_main_func`
        """
        with patch.object(
            sys, "argv", [self.file_name] + cli_args
        ), self.assertRaises(SystemExit) as raise_ctx:
            self.cli_main_func()  # pylint: disable=not-callable

        self.assertEqual(raise_ctx.exception.code, status)
