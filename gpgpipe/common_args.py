# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  common_args.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  Provides a collection of constants that can be used as `*args` or `**kwargs`
  to argparse.ArgumentParser.add_argument() for the subcommands of the
  gpgpipe cli, which share most of their command line arguments.

  Example Usage:

  ```
  from gpgpipe.common_args import INPUT_ARGS, INPUT_KWARGS
  parser = argparse.ArgumentParser()
  parser.add_argument(*INPUT_ARGS, **INPUT_KWARGS)
  ```

"""
INPUT_ARGS = ["-i", "--input"]
INPUT_KWARGS = {
    "dest": "input",
    "type": str,
    "metavar": "<path>",
    "help": "path to the file to read. Default is standard input.",
}

OUTPUT_ARGS = ["-o", "--output"]
OUTPUT_KWARGS = {
    "dest": "output",
    "type": str,
    "metavar": "<path>",
    "help": (
        "path to the file to write. It is overwritten if it exists. Default"
        " is standard output."
    ),
}

RECIPIENT_ARGS = ["-r", "--recipient"]
RECIPIENT_KWARGS = {
    "dest": "recipients",
    "action": "append",
    "metavar": "<id>",
    "help": (
        "key identifier or user id to encrypt for. Can be passed multiple"
        " times."
    ),
}

GPG_HOME_ARGS = ["--gpg-home"]
GPG_HOME_KWARGS = {
    "dest": "gpg_home",
    "type": str,
    "metavar": "<path>",
    "help": (
        "path to a GPG home directory. If '--gpg-home' is not passed, the"
        " default GPG home directory is used."
    ),
}

GPG_COMMAND_ARGS = ["--gpg-command"]
GPG_COMMAND_KWARGS = {
    "dest": "gpg_command",
    "type": str,
    "metavar": "<path>",
    "help": (
        "gpg executable to run. Overrides the 'GPG_COMMAND' setting. Default"
        " is 'gpg'."
    ),
}

TIMEOUT_ARGS = ["--timeout"]
TIMEOUT_KWARGS = {
    "dest": "timeout",
    "type": float,
    "metavar": "<seconds>",
    "help": (
        "kill gpg if it has not finished after this many seconds. Overrides"
        " the 'SUBPROCESS_TIMEOUT' setting."
    ),
}

GPG_EXTRA_ARGS = ["gpg_args"]
GPG_EXTRA_KWARGS = {
    "nargs": "*",
    "metavar": "<gpg arg>",
    "help": (
        "additional arguments passed to gpg. They are separated from named"
        " and optional arguments by a double dash '--'."
    ),
}

VERBOSE_ARGS = ["-v", "--verbose"]
VERBOSE_KWARGS = {
    "dest": "verbose",
    "action": "store_true",
    "help": "show more output",
}

QUIET_ARGS = ["-q", "--quiet"]
QUIET_KWARGS = {
    "dest": "quiet",
    "action": "store_true",
    "help": "suppress all output",
}


def title_case_action_groups(parser):
    """Capitalize the first character of all words in the title of each action
    group of the passed parser.

    """
    for (
        action_group
    ) in parser._action_groups:  # pylint: disable=protected-access
        action_group.title = action_group.title.title()
