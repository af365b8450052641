# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  streams.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Sources and destinations for streaming gpg invocations.

  A source is either a `PathSource` (a file that gpgpipe opens and closes) or
  a `StreamSource` (a readable object owned by the caller). Likewise a
  destination is a `PathDestination` or a `StreamDestination`. Callers pass
  plain paths or stream objects, which are resolved into one of the variants
  once, at the API boundary, by `as_source` and `as_destination`.

  Stream objects can be regular (blocking) file objects or asyncio streams:
  `read` may return an awaitable, and writables with a `drain` method are
  drained after each write, so that backpressure is honored.

  Regular files, including those opened for a `PathSource` or
  `PathDestination`, are read and written on the event loop thread, one chunk
  of at most `settings.STREAM_CHUNK_SIZE` bytes at a time. Each such call
  blocks the loop only for the duration of a single chunk transfer. Callers
  reading from slow blocking files (e.g. network mounts) should wrap them in
  an asyncio stream instead.

"""
import inspect
import os

import attr

from gpgpipe.exceptions import (
    StreamDestinationError,
    StreamSourceError,
    ValidationError,
)


def _is_path(obj):
    return isinstance(obj, (str, os.PathLike))


@attr.s(frozen=True)
class PathSource:
    """A file path, opened for binary reading right before gpg is spawned."""

    path = attr.ib()
    owned = True

    def open(self):
        """Open and return the file.

        Raises:
          StreamSourceError: The file does not exist or cannot be opened.

        """
        try:
            return open(self.path, "rb")  # pylint: disable=consider-using-with

        except FileNotFoundError as e:
            raise StreamSourceError(
                f"'{os.fspath(self.path)}' does not exist. Error: {e.strerror}"
            ) from e

        except OSError as e:
            raise StreamSourceError(
                f"Error opening '{os.fspath(self.path)}'. Error: {e.strerror}"
            ) from e


@attr.s(frozen=True)
class StreamSource:
    """A readable stream supplied, and closed, by the caller."""

    stream = attr.ib()
    owned = False

    def open(self):
        return self.stream


@attr.s(frozen=True)
class PathDestination:
    """A file path, opened (truncated) for binary writing right before gpg is
    spawned."""

    path = attr.ib()
    owned = True

    def open(self):
        """Open and return the file.

        Raises:
          StreamDestinationError: The file cannot be opened for writing.

        """
        try:
            return open(self.path, "wb")  # pylint: disable=consider-using-with

        except OSError as e:
            raise StreamDestinationError(
                f"Error opening '{os.fspath(self.path)}'. Error: {e.strerror}"
            ) from e


@attr.s(frozen=True)
class StreamDestination:
    """A writable stream supplied, and closed, by the caller."""

    stream = attr.ib()
    owned = False

    def open(self):
        return self.stream


def as_source(obj):
    """Resolve a path or readable stream into a source variant.

    Raises:
      ValidationError: `obj` is neither a path nor an object with `read`.

    """
    if isinstance(obj, (PathSource, StreamSource)):
        return obj

    if _is_path(obj):
        return PathSource(obj)

    if callable(getattr(obj, "read", None)):
        return StreamSource(obj)

    raise ValidationError(
        "Missing 'source' option (path or readable stream), got"
        f" '{obj} ({type(obj)})'"
    )


def as_destination(obj):
    """Resolve a path or writable stream into a destination variant.

    Raises:
      ValidationError: `obj` is neither a path nor an object with `write`.

    """
    if isinstance(obj, (PathDestination, StreamDestination)):
        return obj

    if _is_path(obj):
        return PathDestination(obj)

    if callable(getattr(obj, "write", None)):
        return StreamDestination(obj)

    raise ValidationError(
        "Missing 'dest' option (path or writable stream), got"
        f" '{obj} ({type(obj)})'"
    )


async def read_chunk(stream, size):
    """Read at most `size` bytes from a blocking or asyncio readable. Text
    chunks are UTF-8 encoded."""
    chunk = stream.read(size)
    if inspect.isawaitable(chunk):
        chunk = await chunk

    if isinstance(chunk, str):
        chunk = chunk.encode("utf-8")

    return chunk or b""


async def write_chunk(stream, data):
    """Write `data` to a blocking or asyncio writable and wait until it can
    accept more."""
    written = stream.write(data)
    if inspect.isawaitable(written):
        await written

    drain = getattr(stream, "drain", None)
    if callable(drain):
        await drain()


async def read_all(stream, chunk_size):
    """Accumulate all chunks of a readable until EOF. Errors raised by the
    stream propagate to the caller."""
    chunks = []
    while True:
        chunk = await read_chunk(stream, chunk_size)
        if not chunk:
            break
        chunks.append(chunk)

    return b"".join(chunks)
