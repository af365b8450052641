#!/usr/bin/env python

# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  gpgpipe_cli.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Provides a command line interface for the functions in gpgpipe.functions.

<Return Codes>
  2 if an exception occurred during argument parsing
  1 if an exception occurred
  0 if no exception occurred

"""
import argparse
import asyncio
import logging
import sys

import gpgpipe.user_settings
from gpgpipe import __version__, functions
from gpgpipe.common_args import (
    GPG_COMMAND_ARGS,
    GPG_COMMAND_KWARGS,
    GPG_EXTRA_ARGS,
    GPG_EXTRA_KWARGS,
    GPG_HOME_ARGS,
    GPG_HOME_KWARGS,
    INPUT_ARGS,
    INPUT_KWARGS,
    OUTPUT_ARGS,
    OUTPUT_KWARGS,
    QUIET_ARGS,
    QUIET_KWARGS,
    RECIPIENT_ARGS,
    RECIPIENT_KWARGS,
    TIMEOUT_ARGS,
    TIMEOUT_KWARGS,
    VERBOSE_ARGS,
    VERBOSE_KWARGS,
    title_case_action_groups,
)

# Command line interfaces should use gpgpipe base logger (c.f. gpgpipe.log)
LOG = logging.getLogger("gpgpipe")


def _gpg_args(args):
    """Assemble gpg arguments from named cli arguments and trailing gpg
    arguments."""
    gpg_args = []
    if args.gpg_home:
        gpg_args += ["--homedir", args.gpg_home]

    for recipient in getattr(args, "recipients", None) or []:
        gpg_args += ["--recipient", recipient]

    return gpg_args + args.gpg_args


def _invoke_kwargs(args):
    return {"executable": args.gpg_command, "timeout": args.timeout}


def _read_input(args):
    if args.input:
        with open(args.input, "rb") as f:
            return f.read()

    return sys.stdin.buffer.read()


def _write_output(args, data):
    if args.output:
        with open(args.output, "wb") as f:
            f.write(data)

    else:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()


async def _pipe(args, to_file, to_stream):
    """Stream input through gpg, into the output file or standard output."""
    source = args.input or sys.stdin.buffer
    if args.output:
        await to_file(source, args.output, _gpg_args(args),
            **_invoke_kwargs(args))

    else:
        pipeline = await to_stream(source, sys.stdout.buffer, _gpg_args(args),
            **_invoke_kwargs(args))
        await pipeline.wait()


async def _encrypt(args):
    await _pipe(args, functions.encrypt_to_file, functions.encrypt_to_stream)


async def _decrypt(args):
    await _pipe(args, functions.decrypt_to_file, functions.decrypt_to_stream)


async def _clearsign(args):
    result = await functions.clearsign(_read_input(args), _gpg_args(args),
        **_invoke_kwargs(args))
    _write_output(args, result.stdout)


async def _verify(args):
    result = await functions.verify_signature(_read_input(args),
        _gpg_args(args), **_invoke_kwargs(args))
    _write_output(args, result.stdout)


async def _import(args):
    ignore_existing = False if args.strict_import else None
    if args.input:
        result = await functions.import_key_from_file(args.input,
            _gpg_args(args), ignore_existing=ignore_existing,
            **_invoke_kwargs(args))

    else:
        result = await functions.import_key(sys.stdin.buffer.read(),
            _gpg_args(args), ignore_existing=ignore_existing,
            **_invoke_kwargs(args))

    if result.already_present:
        LOG.warning("Key '%s' is already in the secret keyring.",
            result.fingerprint)

    elif result.fingerprint:
        LOG.info("Imported key '%s'.", result.fingerprint)

    _write_output(args, result.output.encode("utf-8"))


async def _remove(args):
    result = await functions.remove_key(args.identifier, _gpg_args(args),
        **_invoke_kwargs(args))
    _write_output(args, result.stdout)


def _add_subcommand(subparsers, name, func, description, has_input=True):
    parser = subparsers.add_parser(name, description=description,
        help=description)
    parser.set_defaults(func=func)
    if has_input:
        parser.add_argument(*INPUT_ARGS, **INPUT_KWARGS)
    parser.add_argument(*OUTPUT_ARGS, **OUTPUT_KWARGS)
    return parser


def create_parser():
    """Create and return configured ArgumentParser instance."""
    parser = argparse.ArgumentParser(
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
gpgpipe runs the gpg command line tool in batch mode to encrypt, decrypt,
clearsign or verify data, and to import or remove keys. Input is read from
standard input or a file, output is written to standard output or a file.
Arguments after a double dash '--' are passed to gpg as they are.""",
    )

    parser.epilog = """EXAMPLE USAGE

Encrypt 'report.pdf' for key '6F20F59D', writing ascii-armored output.

  {prog} encrypt -r 6F20F59D -i report.pdf -o report.pdf.asc -- --armor


Decrypt from standard input using a GPG home directory other than the default.

  {prog} --gpg-home ~/.gnupg-work decrypt < report.pdf.asc > report.pdf


Import a key, then remove it again.

  {prog} import -i key.asc
  {prog} remove 6F20F59D -- --yes

""".format(prog=parser.prog)

    parser.add_argument(*GPG_HOME_ARGS, **GPG_HOME_KWARGS)
    parser.add_argument(*GPG_COMMAND_ARGS, **GPG_COMMAND_KWARGS)
    parser.add_argument(*TIMEOUT_ARGS, **TIMEOUT_KWARGS)

    verbosity_args = parser.add_mutually_exclusive_group(required=False)
    verbosity_args.add_argument(*VERBOSE_ARGS, **VERBOSE_KWARGS)
    verbosity_args.add_argument(*QUIET_ARGS, **QUIET_KWARGS)

    parser.add_argument(
        "--version",
        action="version",
        version=f"{parser.prog} {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    encrypt = _add_subcommand(subparsers, "encrypt", _encrypt,
        "encrypt data for one or more recipients.")
    encrypt.add_argument(*RECIPIENT_ARGS, **RECIPIENT_KWARGS)

    _add_subcommand(subparsers, "decrypt", _decrypt, "decrypt data.")
    _add_subcommand(subparsers, "clearsign", _clearsign,
        "make a clear text signature.")
    _add_subcommand(subparsers, "verify", _verify,
        "verify a signed message and show gpg's report.")

    import_ = _add_subcommand(subparsers, "import", _import,
        "import a key and show gpg's report.")
    import_.add_argument(
        "--strict-import",
        dest="strict_import",
        action="store_true",
        help=(
            "fail if the imported secret key is already in the secret"
            " keyring. Overrides the 'IGNORE_EXISTING_SECRET_KEY' setting."
        ),
    )

    remove = _add_subcommand(subparsers, "remove", _remove,
        "remove the public AND secret key of a key identifier.",
        has_input=False)
    remove.add_argument("identifier", type=str, metavar="<id>",
        help="identifier, usually the fingerprint, of the key to remove.")

    for subparser in subparsers.choices.values():
        subparser.add_argument(*GPG_EXTRA_ARGS, **GPG_EXTRA_KWARGS)
        title_case_action_groups(subparser)

    title_case_action_groups(parser)

    return parser


def main():
    """Parse arguments and run the chosen gpg operation."""
    parser = create_parser()
    args = parser.parse_args()

    LOG.setLevelVerboseOrQuiet(args.verbose, args.quiet)

    try:
        # Override defaults in settings.py with environment variables and
        # RCfiles
        gpgpipe.user_settings.set_settings()

        asyncio.run(args.func(args))

    except Exception as e:  # pylint: disable=broad-exception-caught
        LOG.error("(gpgpipe) %s: %s", type(e).__name__, e)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
