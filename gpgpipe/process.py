# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  process.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Spawn the gpg executable as an asyncio subprocess and either

  - feed it a payload from memory and collect its standard streams
    (`invoke`), or
  - pipe a source stream through it into a destination stream
    (`invoke_streaming`).

  The executed command is always

    [executable] + global_args + args

  where `executable` and `global_args` default to
  `gpgpipe.settings.GPG_COMMAND` and `gpgpipe.settings.GPG_GLOBAL_ARGS`.

  Each call spawns exactly one child process, which it owns exclusively.
  Concurrent calls are not serialized in any way.

"""
import asyncio
import logging
import subprocess  # nosec

import attr

import gpgpipe.settings
from gpgpipe.exceptions import InvocationTimeoutError, ProcessError, SpawnError
from gpgpipe.formats import (
    _check_non_empty_str,
    _check_chunk_size,
    _check_payload,
    _check_str_list,
    _check_timeout,
)
from gpgpipe.streams import (
    as_destination,
    as_source,
    read_chunk,
    write_chunk,
)

# Inherits from gpgpipe base logger (c.f. gpgpipe.log)
LOG = logging.getLogger(__name__)

PIPE = subprocess.PIPE


@attr.s(frozen=True)
class InvocationResult:
    """Outcome of a gpg invocation that exited with return code zero.

    Attributes:
      args: The executed command as list of str.
      returncode: The exit code (always 0).
      stdout: All bytes gpg wrote to stdout, in arrival order.
      stderr: All text gpg wrote to stderr, in arrival order. Some operations
          write informational content to stderr even on success.

    """

    args = attr.ib()
    returncode = attr.ib()
    stdout = attr.ib(default=b"")
    stderr = attr.ib(default="")


class Pipeline:
    """Handle on a streaming invocation that writes into a caller-supplied
    destination stream.

    It is returned as soon as gpg was spawned, while data may still flow.
    `await pipeline.wait()` to learn when the source was fully piped through
    gpg into `dest` and gpg exited. The outcome is computed by a single task
    and is the same for every call to `wait`.

    """

    def __init__(self, cmd, dest, task):
        self.args = cmd
        self.dest = dest
        self._task = task

    def done(self):
        """Return True if the pipeline completed or failed."""
        return self._task.done()

    async def wait(self):
        """Wait for the pipeline to complete.

        Raises:
          gpgpipe.exceptions.ProcessError: gpg exited with non-zero code.
          gpgpipe.exceptions.InvocationTimeoutError: gpg timed out.
          Exception: The first error raised while reading from the source or
              writing to the destination.

        """
        await self._task


def _build_command(args, executable, global_args):
    if executable is None:
        executable = gpgpipe.settings.GPG_COMMAND

    if global_args is None:
        global_args = gpgpipe.settings.GPG_GLOBAL_ARGS

    _check_non_empty_str(executable)
    _check_str_list(global_args)
    _check_str_list(args)

    return [executable, *global_args, *args]


def _resolve_timeout(timeout):
    if timeout is None:
        timeout = gpgpipe.settings.SUBPROCESS_TIMEOUT

    _check_timeout(timeout)
    return timeout


async def _spawn(cmd):
    """Start the child with all three standard streams piped.

    Raises:
      SpawnError: The executable is not present or non-executable.

    """
    LOG.debug("Running '%s'...", " ".join(cmd))
    try:
        return await asyncio.create_subprocess_exec(
            *cmd, stdin=PIPE, stdout=PIPE, stderr=PIPE
        )

    except OSError as e:
        raise SpawnError(cmd, e) from e


async def _terminate(proc):
    """Kill the child, if it still runs, and reap it.

    Output left in the pipes is read and discarded. The child only counts as
    exited once all of its pipes are closed, and a pipe whose reader was
    paused because nobody consumed it never closes.
    """
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:  # pragma: no cover
            # Exited between the returncode check and the kill
            pass

    await proc.communicate()


async def _supervise(proc, cmd, coro, timeout):
    """Await `coro`, which drives `proc`. If `coro` fails, is cancelled or
    does not finish within `timeout` seconds, `proc` is killed before the
    error propagates."""
    try:
        return await asyncio.wait_for(coro, timeout)

    except asyncio.TimeoutError as e:
        await _terminate(proc)
        raise InvocationTimeoutError(cmd, timeout) from e

    except BaseException:
        await _terminate(proc)
        raise


def _check_returncode(cmd, returncode, stdout, stderr):
    LOG.debug("'%s' exited with return code %s", cmd[0], returncode)
    if returncode != 0:
        raise ProcessError(cmd, returncode, stdout, stderr)


def _decode(data):
    return data.decode("utf-8", errors="replace")


async def invoke(input_data, args, executable=None, global_args=None,
        timeout=None):
    """
    <Purpose>
      Run gpg on a payload held in memory.

      The payload is written to gpg's stdin, which is then closed so that gpg
      sees EOF. stdout and stderr are collected until gpg exits.

    <Arguments>
      input_data:
              The payload (bytes or str, str is UTF-8 encoded). None sends
              an empty stdin.

      args:
              List of str arguments, appended to the global arguments.

      executable: (optional)
              The gpg executable. Default is `settings.GPG_COMMAND`.

      global_args: (optional)
              List of str arguments placed before `args`. Default is
              `settings.GPG_GLOBAL_ARGS`.

      timeout: (optional)
              Seconds after which gpg is killed. Default is
              `settings.SUBPROCESS_TIMEOUT`, None means no limit.

    <Exceptions>
      gpgpipe.exceptions.ValidationError:
              If an argument has the wrong type.

      gpgpipe.exceptions.SpawnError:
              If the executable is not present or non-executable.

      gpgpipe.exceptions.ProcessError:
              If gpg exits with a non-zero return code. The message is the
              stderr text, or the stdout text if stderr is empty.

      gpgpipe.exceptions.InvocationTimeoutError:
              If gpg does not exit within `timeout` seconds.

    <Side Effects>
      Runs gpg in a subprocess.

    <Returns>
      An InvocationResult.

    """
    _check_payload(input_data)
    cmd = _build_command(args, executable, global_args)
    timeout = _resolve_timeout(timeout)

    if input_data is None:
        input_data = b""
    elif isinstance(input_data, str):
        input_data = input_data.encode("utf-8")

    proc = await _spawn(cmd)

    # `communicate` feeds and closes stdin while reading both output streams,
    # and ignores a child that exits without consuming all of stdin.
    stdout, stderr = await _supervise(
        proc, cmd, proc.communicate(bytes(input_data)), timeout
    )
    stderr = _decode(stderr)

    _check_returncode(cmd, proc.returncode, stdout, stderr)
    return InvocationResult(cmd, proc.returncode, stdout, stderr)


async def _pump_source(source, stdin, chunk_size):
    """Copy source into the child's stdin, then close stdin."""
    try:
        while True:
            chunk = await read_chunk(source, chunk_size)
            if not chunk:
                break
            stdin.write(chunk)
            await stdin.drain()

    except (BrokenPipeError, ConnectionResetError):
        # gpg stopped reading, its return code tells why
        LOG.debug("gpg closed stdin before the source was drained")

    finally:
        stdin.close()


async def _pump_destination(stdout, dest, chunk_size):
    """Copy the child's stdout into dest until EOF."""
    while True:
        chunk = await stdout.read(chunk_size)
        if not chunk:
            break
        await write_chunk(dest, chunk)

    flush = getattr(dest, "flush", None)
    if callable(flush):
        flush()


async def _collect(reader, chunk_size):
    chunks = []
    while True:
        chunk = await reader.read(chunk_size)
        if not chunk:
            break
        chunks.append(chunk)

    return b"".join(chunks)


async def _run_pipeline(proc, cmd, source, dest, chunk_size):
    tasks = [
        asyncio.ensure_future(_pump_source(source, proc.stdin, chunk_size)),
        asyncio.ensure_future(
            _pump_destination(proc.stdout, dest, chunk_size)
        ),
        asyncio.ensure_future(_collect(proc.stderr, chunk_size)),
    ]
    try:
        _, _, stderr = await asyncio.gather(*tasks)

    except BaseException:
        for task in tasks:
            task.cancel()
        # A stream only allows one waiting reader, the pumps must be gone
        # before the pipes are drained
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    returncode = await proc.wait()
    _check_returncode(cmd, returncode, b"", _decode(stderr))


async def _close_after(coro, files):
    try:
        return await coro

    finally:
        for f in files:
            f.close()


async def invoke_streaming(source, dest, args, executable=None,
        global_args=None, timeout=None):
    """
    <Purpose>
      Pipe a source through gpg into a destination.

      Source and destination are each a path or an open stream. Paths are
      opened before gpg is spawned and closed by gpgpipe, streams belong to
      the caller. Data is moved in chunks of at most
      `settings.STREAM_CHUNK_SIZE` bytes, waiting for each side to accept
      more, so neither side is buffered without bound.

      If `dest` is a path, the call returns once gpg exited and the
      destination file is complete and closed.

      If `dest` is a stream, the call returns a Pipeline as soon as gpg was
      spawned. Data may still be flowing; `await pipeline.wait()` to observe
      completion or failure.

    <Arguments>
      source:
              Path (str or os.PathLike) or readable stream.

      dest:
              Path (str or os.PathLike) or writable stream.

      args:
              List of str arguments, appended to the global arguments.

      executable, global_args, timeout: (optional)
              See `invoke`.

    <Exceptions>
      gpgpipe.exceptions.ValidationError:
              If source or dest is neither a path nor a stream, or another
              argument has the wrong type.

      gpgpipe.exceptions.StreamSourceError:
              If the source path does not exist or cannot be opened. gpg is
              not spawned.

      gpgpipe.exceptions.StreamDestinationError:
              If the destination path cannot be opened. gpg is not spawned.

      gpgpipe.exceptions.SpawnError:
              If the executable is not present or non-executable.

      gpgpipe.exceptions.ProcessError:
              If dest is a path and gpg exits with a non-zero return code.

      gpgpipe.exceptions.InvocationTimeoutError:
              If dest is a path and gpg does not exit within `timeout`.

    <Side Effects>
      Runs gpg in a subprocess, reads source, writes dest.

    <Returns>
      None if dest is a path, a Pipeline otherwise.

    """
    source = as_source(source)
    dest = as_destination(dest)
    cmd = _build_command(args, executable, global_args)
    timeout = _resolve_timeout(timeout)
    chunk_size = gpgpipe.settings.STREAM_CHUNK_SIZE
    _check_chunk_size(chunk_size)

    owned = []
    source_stream = source.open()
    if source.owned:
        owned.append(source_stream)

    try:
        dest_stream = dest.open()
        if dest.owned:
            owned.append(dest_stream)

        proc = await _spawn(cmd)

    except BaseException:
        for f in owned:
            f.close()
        raise

    pipeline = _close_after(
        _supervise(
            proc,
            cmd,
            _run_pipeline(proc, cmd, source_stream, dest_stream, chunk_size),
            timeout,
        ),
        owned,
    )

    if dest.owned:
        await pipeline
        return None

    return Pipeline(cmd, dest_stream, asyncio.ensure_future(pipeline))
