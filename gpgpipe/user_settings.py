# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  user_settings.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Provides methods to parse environment variables (`get_env`) and RCfiles
  (`get_rc`) and to override default settings (`set_settings`) defined in the
  `gpgpipe.settings` module.

  Check out the respective docstrings to learn about the requirements for
  environment variables and RCfiles (includes examples).

"""
import configparser
import logging
import os

import gpgpipe.settings
from gpgpipe.exceptions import ValidationError

# Inherits from gpgpipe base logger (c.f. gpgpipe.log)
LOG = logging.getLogger(__name__)


USER_PATH = os.path.expanduser("~")

# Prefix required by environment variables to be considered as gpgpipe
# settings
ENV_PREFIX = "GPGPIPE_"

# List of considered rcfile paths in the order they get parsed and overridden,
# i.e. the same setting in `/etc/gpgpipe/config` and `.gpgpiperc` (cwd) uses
# the latter
RC_PATHS = [
    os.path.join("/etc", "gpgpipe", "config"),
    os.path.join("/etc", "gpgpiperc"),
    os.path.join(USER_PATH, ".config", "gpgpipe", "config"),
    os.path.join(USER_PATH, ".config", "gpgpipe"),
    os.path.join(USER_PATH, ".gpgpipe", "config"),
    os.path.join(USER_PATH, ".gpgpiperc"),
    ".gpgpiperc",
]


def _colon_split(value):
    """If `value` contains colons, return a list split at colons,
    return value otherwise."""
    value_list = value.split(":")
    if len(value_list) > 1:
        return value_list

    return value


def _to_str(value):
    # Undo the colon split, e.g. for 'C:\gnupg\gpg.exe'
    if isinstance(value, list):
        return ":".join(value)

    return value


def _to_list(value):
    if isinstance(value, list):
        return value

    return value.split()


def _to_bool(value):
    value = str(value).strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True

    if value in ("0", "false", "no", "off"):
        return False

    raise ValueError(f"not a boolean: '{value}'")


def _to_chunk_size(value):
    size = int(value)
    if size <= 0:
        raise ValueError(f"not a positive number of bytes: '{value}'")

    return size


def _to_timeout(value):
    if str(value).strip().lower() in ("", "none"):
        return None

    return float(value)


# Settings that may be overridden by the user and how to convert the parsed
# str (or list of str) values to the type used in `settings.py`
GPGPIPE_SETTINGS = {
    "GPG_COMMAND": _to_str,
    "GPG_GLOBAL_ARGS": _to_list,
    "SUBPROCESS_TIMEOUT": _to_timeout,
    "STREAM_CHUNK_SIZE": _to_chunk_size,
    "IGNORE_EXISTING_SECRET_KEY": _to_bool,
}


def get_env():
    """
    <Purpose>
      Parse environment for variables with prefix `ENV_PREFIX` and return
      a dict of key-value pairs.

      The prefix `ENV_PREFIX` is stripped from the keys in the returned dict.

      Values that contain colons (:) are split at the postion of the colons and
      converted into a list.


      Example:

      ```
      # Exporting variables in e.g. bash
      export GPGPIPE_GPG_COMMAND='gpg2'
      export GPGPIPE_GPG_GLOBAL_ARGS='--batch:--no-tty'
      export GPGPIPE_SUBPROCESS_TIMEOUT='10'
      ```

      produces

      ```
      {
        "GPG_COMMAND": "gpg2"
        "GPG_GLOBAL_ARGS": ["--batch", "--no-tty"]
        "SUBPROCESS_TIMEOUT": "10"
      }
      ```

    <Exceptions>
      None.

    <Side Effects>
      Reads the environment.

    <Returns>
      A dictionary containing the parsed key-value pairs.

    """
    env_dict = {}

    for name, value in os.environ.items():
        if name.startswith(ENV_PREFIX) and len(name) > len(ENV_PREFIX):
            stripped_name = name[len(ENV_PREFIX):]

            env_dict[stripped_name] = _colon_split(value)

    return env_dict


def get_rc():
    """
    <Purpose>
      Reads RCfiles from the paths defined in `RC_PATHS` and returns
      a dictionary with all parsed key-value pairs.

      The RCfile format is as expected by Python's builtin `ConfigParser` with
      the addition that values that contain colons (:) are split at the
      position of the colons and converted into a list.

      Section titles in RCfiles are ignored when parsing the key-value pairs.
      However, there has to be at least one section defined.

      The paths in `RC_PATHS` are ordered in reverse precedence, i.e. each
      file's settings override a previous file's settings, e.g. a setting
      defined in `.gpgpiperc` (in the current working dir) overrides the same
      setting defined in `~/.gpgpiperc` (in the user's home dir) and so on ...

      Example:

      ```
      # E.g. file `.gpgpiperc` in current working directory
      [gpgpipe settings]
      GPG_COMMAND = gpg2
      GPG_GLOBAL_ARGS = --batch:--no-tty
      SUBPROCESS_TIMEOUT = 20
      ```

      produces

      ```
      {
        "GPG_COMMAND": "gpg2"
        "GPG_GLOBAL_ARGS": ["--batch", "--no-tty"]
        "SUBPROCESS_TIMEOUT": "20"
      }
      ```

    <Exceptions>
      None.

    <Side Effects>
      Calls function to read files from disk.

    <Returns>
      A dictionary containing the parsed key-value pairs.

    """
    rc_dict = {}

    config = configparser.ConfigParser()
    # Reset `optionxform`'s default case conversion to enable case-sensitivity
    config.optionxform = str
    config.read(RC_PATHS)

    for section in config.sections():
        for name, value in config.items(section):
            rc_dict[name] = _colon_split(value)

    return rc_dict


def set_settings():
    """
    <Purpose>
      Calls functions that read gpgpipe related environment variables and
      RCfiles and overrides variables in `settings.py` with the retrieved
      values, if they are whitelisted in `GPGPIPE_SETTINGS`.

      Settings defined in RCfiles take precedence over settings defined in
      environment variables.

    <Exceptions>
      gpgpipe.exceptions.ValidationError:
              If a whitelisted setting cannot be converted to its type.

    <Side Effects>
      Calls functions that read environment variables and files from disk.

    <Returns>
      None.

    """
    user_settings = get_env()
    user_settings.update(get_rc())

    # If the user has specified one of the settings whitelisted in
    # GPGPIPE_SETTINGS per envvar or rcfile, override the item in `settings.py`
    for setting, convert in GPGPIPE_SETTINGS.items():
        user_setting = user_settings.get(setting)
        if user_setting:
            try:
                user_setting = convert(user_setting)

            except (TypeError, ValueError) as e:
                raise ValidationError(
                    f"invalid value for setting '{setting}': {e}"
                ) from e

            LOG.info("Setting (user): %s=%s", setting, user_setting)
            setattr(gpgpipe.settings, setting, user_setting)

        else:
            default_setting = getattr(gpgpipe.settings, setting)
            LOG.info("Setting (default): %s=%s", setting, default_setting)
