# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  settings.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  A central place to define default settings that can be used throughout the
  package.

  Defaults can be changed,
   - here (hardcoded),
   - programmatically, e.g.
     ```
     import gpgpipe.settings
     gpgpipe.settings.GPG_COMMAND = "gpg2"
     ```
  - or, when using gpgpipe via command line tooling, with environment
    variables or RCfiles, see the `gpgpipe.user_settings` module

"""
import io

# The debug setting is used to set to the gpgpipe base logger to logging.DEBUG
DEBUG = False

# Name or path of the executable spawned for every invocation
GPG_COMMAND = "gpg"

# Arguments placed right after the executable, before caller and operation
# arguments. '--batch' keeps gpg from prompting on the (closed) terminal.
GPG_GLOBAL_ARGS = ["--batch"]

# Seconds after which a running gpg process is killed, None means no limit
SUBPROCESS_TIMEOUT = None

# Maximum number of bytes moved per read when piping streams through gpg
STREAM_CHUNK_SIZE = io.DEFAULT_BUFFER_SIZE

# Treat a failed key import reporting "already in secret keyring" as success
IGNORE_EXISTING_SECRET_KEY = True
