# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import shlex

def split_options(options):
    """Split an option string from the configuration into arguments.

    Args:
        options (str): The options, as they would be typed in a shell.

    Returns:
        A list with the separate options.
    """
    if not options:
        return []
    if isinstance(options, list):
        return [str(o) for o in options]
    return shlex.split(str(options))


def stage(*args):
    """Build a single command of a pipeline.

    Every argument is quoted for the shell, so that values from the
    configuration can not inject shell syntax.

    Args:
        args: The command's arguments. An argument is either a string, a
              list of strings or None. Lists are flattened and None is
              skipped.

    Returns:
        The command as a string.
    """
    words = []
    for arg in args:
        if arg is None:
            continue
        if isinstance(arg, (list, tuple)):
            words.extend(arg)
        else:
            words.append(arg)
    return " ".join(shlex.quote(str(w)) for w in words)


class Pipeline:
    """A shell pipeline.

    A pipeline is a sequence of commands, where the output of a command
    is the input of the next command. Optionally the output of the last
    command is redirected into a file.
    """

    def __init__(self, *commands):
        """Constructor that takes the first commands of the pipeline.

        Args:
            commands (str): Commands as built by `stage`.
        """
        self._commands = list(commands)
        self._output = None

    def redirect(self, path):
        """Redirect the output of the last command into `path`.

        Returns:
            The pipeline itself.
        """
        self._output = path
        return self

    def __str__(self):
        text = " | ".join(self._commands)
        if self._output is not None:
            text = "{0} > {1}".format(text, shlex.quote(self._output))
        return text


def compression_stage(job, destination):
    """Build the stage that compresses its input into `destination`.

    The stage reads the data to compress from the preceding command in
    the pipeline. The parent directory of `destination` is created when
    the job creates its destination.

    Args:
        job (BackupJob)  : The job the stage is for.
        destination (str): The compressed file.

    Returns:
        The compression command with its output redirected to
        `destination`.
    """
    job.prepare_parent(destination)
    return str(Pipeline(stage(job.binary("gzip"), job.options("gzip"))).
            redirect(destination))
