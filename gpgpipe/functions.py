# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  functions.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Publicly-usable coroutines to encrypt, decrypt, clearsign and verify data,
  and to import and remove keys, using the gpg command line tool.

  Each operation combines its default arguments (see `gpgpipe.operations`)
  with the optional caller arguments `args`, which are placed first, and
  delegates to `gpgpipe.process.invoke` or
  `gpgpipe.process.invoke_streaming`.

  All coroutines accept the keyword arguments `executable`, `global_args` and
  `timeout`, which are passed on to the process layer unchanged.

  Example:

  ```
  import asyncio
  from gpgpipe import functions

  async def roundtrip():
    encrypted = await functions.encrypt(
        "Hello World", ["--armor", "--recipient", "ABCDEF12"])
    decrypted = await functions.decrypt(encrypted.stdout)
    return decrypted.stdout  # b"Hello World"

  asyncio.run(roundtrip())
  ```

"""
import asyncio
import logging

import attr

import gpgpipe.process
import gpgpipe.settings
from gpgpipe.exceptions import ProcessError
from gpgpipe.formats import _check_chunk_size, _check_non_empty_str
from gpgpipe.operations import (
    ALREADY_IN_SECRET_KEYRING,
    CALL,
    CLEARSIGN,
    DECRYPT,
    ENCRYPT,
    IMPORT,
    REMOVE,
    VERIFY,
    extract_fingerprint,
)
from gpgpipe.streams import read_all

# Inherits from gpgpipe base logger (c.f. gpgpipe.log)
LOG = logging.getLogger(__name__)


@attr.s(frozen=True)
class ImportResult:
    """Outcome of a key import.

    Attributes:
      output: gpg's diagnostic text.
      fingerprint: The first key identifier found in `output`, or None.
      already_present: True if gpg failed because the secret key already is
          in the keyring and the failure was ignored.

    """

    output = attr.ib()
    fingerprint = attr.ib(default=None)
    already_present = attr.ib(default=False)


async def _run(operation, input_data, args, operands=(), **invoke_kwargs):
    return await gpgpipe.process.invoke(
        input_data, operation.build_args(args, operands), **invoke_kwargs
    )


async def _run_streaming(operation, source, dest, args, **invoke_kwargs):
    return await gpgpipe.process.invoke_streaming(
        source, dest, operation.build_args(args), **invoke_kwargs
    )


def _read_path(path):
    with open(path, "rb") as f:
        return f.read()


async def _read_file(path):
    """Read the whole file at `path` in the default executor, so that large
    files do not block the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _read_path, path)


async def _read_stream(stream):
    chunk_size = gpgpipe.settings.STREAM_CHUNK_SIZE
    _check_chunk_size(chunk_size)
    return await read_all(stream, chunk_size)


async def call(input_data, args=None, **invoke_kwargs):
    """Raw call to gpg with `input_data` on stdin and only the global and
    passed arguments. Returns an InvocationResult."""
    return await _run(CALL, input_data, args, **invoke_kwargs)


async def call_streaming(source, dest, args=None, **invoke_kwargs):
    """Raw streaming call to gpg, piping `source` (path or readable stream)
    into `dest` (path or writable stream). See
    `gpgpipe.process.invoke_streaming` for return values."""
    return await _run_streaming(CALL, source, dest, args, **invoke_kwargs)


async def encrypt(data, args=None, **invoke_kwargs):
    """
    <Purpose>
      Encrypt `data`, e.g. for the recipients passed with '--recipient' in
      `args`.

    <Arguments>
      data:
              The plaintext (bytes or str).

      args: (optional)
              List of additional gpg arguments, placed before '--encrypt'.

    <Exceptions>
      gpgpipe.exceptions.SpawnError:
              If gpg is not present or non-executable.

      gpgpipe.exceptions.ProcessError:
              If gpg fails, e.g. because there is no key for a recipient.

    <Side Effects>
      Calls gpg in a subprocess.

    <Returns>
      An InvocationResult, whose `stdout` is the encrypted message.

    """
    return await _run(ENCRYPT, data, args, **invoke_kwargs)


async def encrypt_file(path, args=None, **invoke_kwargs):
    """Read the file at `path` into memory and encrypt it. OSError is raised
    if the file cannot be read."""
    return await encrypt(await _read_file(path), args, **invoke_kwargs)


async def encrypt_stream(stream, args=None, **invoke_kwargs):
    """Read all of the readable `stream` and encrypt it. Errors raised by
    the stream propagate."""
    data = await _read_stream(stream)
    return await encrypt(data, args, **invoke_kwargs)


async def encrypt_to_file(source, dest, args=None, **invoke_kwargs):
    """Encrypt `source` (path or readable stream) into the file at `dest`.
    Returns once gpg exited and `dest` is closed."""
    return await _run_streaming(ENCRYPT, source, dest, args, **invoke_kwargs)


async def encrypt_to_stream(source, dest, args=None, **invoke_kwargs):
    """Encrypt `source` (path or readable stream) into the writable stream
    `dest`. Returns a Pipeline as soon as gpg runs."""
    return await _run_streaming(ENCRYPT, source, dest, args, **invoke_kwargs)


async def decrypt(data, args=None, **invoke_kwargs):
    """
    <Purpose>
      Decrypt `data` with a secret key from the keyring.

    <Arguments>
      data:
              The encrypted message (bytes or str, armored or binary).

      args: (optional)
              List of additional gpg arguments, placed before '--decrypt'.

    <Exceptions>
      gpgpipe.exceptions.SpawnError:
              If gpg is not present or non-executable.

      gpgpipe.exceptions.ProcessError:
              If gpg fails, e.g. because the secret key is missing or the
              data is no OpenPGP message.

    <Side Effects>
      Calls gpg in a subprocess.

    <Returns>
      An InvocationResult, whose `stdout` is the plaintext and whose `stderr`
      holds gpg's informational output, e.g. the key used for decryption.

    """
    return await _run(DECRYPT, data, args, **invoke_kwargs)


async def decrypt_file(path, args=None, **invoke_kwargs):
    """Read the file at `path` into memory and decrypt it. OSError is raised
    if the file cannot be read."""
    return await decrypt(await _read_file(path), args, **invoke_kwargs)


async def decrypt_stream(stream, args=None, **invoke_kwargs):
    """Read all of the readable `stream` and decrypt it. Errors raised by
    the stream propagate."""
    data = await _read_stream(stream)
    return await decrypt(data, args, **invoke_kwargs)


async def decrypt_to_file(source, dest, args=None, **invoke_kwargs):
    """Decrypt `source` (path or readable stream) into the file at `dest`.
    Returns once gpg exited and `dest` is closed."""
    return await _run_streaming(DECRYPT, source, dest, args, **invoke_kwargs)


async def decrypt_to_stream(source, dest, args=None, **invoke_kwargs):
    """Decrypt `source` (path or readable stream) into the writable stream
    `dest`. Returns a Pipeline as soon as gpg runs."""
    return await _run_streaming(DECRYPT, source, dest, args, **invoke_kwargs)


async def clearsign(data, args=None, **invoke_kwargs):
    """Clearsign `data`. The InvocationResult's `stdout` is the signed
    message."""
    return await _run(CLEARSIGN, data, args, **invoke_kwargs)


async def verify_signature(data, args=None, **invoke_kwargs):
    """
    <Purpose>
      Verify the signed message `data`.

      gpg writes its verification report to stderr, which some environments
      discard. It is redirected to stdout ('--logger-fd 1') instead, so that
      the report is the result's `stdout` on success, and the message of the
      raised ProcessError on failure.

    <Exceptions>
      gpgpipe.exceptions.ProcessError:
              If the signature is bad or cannot be checked.

    <Returns>
      An InvocationResult.

    """
    return await _run(VERIFY, data, args, **invoke_kwargs)


async def import_key(key_data, args=None, ignore_existing=None,
        **invoke_kwargs):
    """
    <Purpose>
      Import the (usually ascii-armored) key `key_data` into the keyring.

      The fingerprint is read from gpg's diagnostic output, i.e. the first
      'key <hex>:' it reports.

      gpg fails if a secret key is imported that is already in the secret
      keyring. Unless `ignore_existing` is False, that failure is treated as
      success: the diagnostic text is returned and `already_present` is set.
      Callers that need to tell both cases apart must check that attribute.

    <Arguments>
      key_data:
              The key (bytes or str).

      args: (optional)
              List of additional gpg arguments, e.g. ['--homedir', path].

      ignore_existing: (optional)
              Whether to ignore "already in secret keyring" failures. Default
              is `settings.IGNORE_EXISTING_SECRET_KEY`.

    <Exceptions>
      gpgpipe.exceptions.SpawnError:
              If gpg is not present or non-executable.

      gpgpipe.exceptions.ProcessError:
              If gpg fails, e.g. with "no valid OpenPGP data found" for data
              that is no key.

    <Side Effects>
      Calls gpg in a subprocess, which modifies the keyring.

    <Returns>
      An ImportResult.

    """
    if ignore_existing is None:
        ignore_existing = gpgpipe.settings.IGNORE_EXISTING_SECRET_KEY

    try:
        result = await _run(IMPORT, key_data, args, **invoke_kwargs)

    except ProcessError as e:
        if not (ignore_existing and ALREADY_IN_SECRET_KEYRING in str(e)):
            raise

        LOG.info("Key is already in secret keyring, ignoring import failure")
        output = str(e)
        return ImportResult(output, extract_fingerprint(output), True)

    output = result.stdout.decode("utf-8", errors="replace")
    return ImportResult(output, extract_fingerprint(output))


async def import_key_from_file(path, args=None, ignore_existing=None,
        **invoke_kwargs):
    """Read the key file at `path` and import it, see `import_key`. OSError
    is raised if the file cannot be read."""
    return await import_key(
        await _read_file(path), args, ignore_existing=ignore_existing,
        **invoke_kwargs
    )


async def remove_key(identifier, args=None, **invoke_kwargs):
    """
    <Purpose>
      Remove the key identified by `identifier` (usually a fingerprint).

      WARNING: This deletes both the public and the secret key! gpg in batch
      mode may additionally require '--yes' in `args`.

    <Exceptions>
      gpgpipe.exceptions.ValidationError:
              If identifier is not a non-empty str.

      gpgpipe.exceptions.ProcessError:
              If gpg fails, e.g. because the key is not found.

    <Returns>
      An InvocationResult, whose `stdout` holds gpg's diagnostic text.

    """
    _check_non_empty_str(identifier)
    return await _run(REMOVE, None, args, operands=[identifier],
        **invoke_kwargs)
