# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import logging
import subprocess

# Replacement for secrets in logged commands.
MASK = "****"


def redact(text, secrets):
    """Replace every secret in `text` by a mask.

    Args:
        text (str)    : The text to redact.
        secrets (list): The strings that must not be shown.

    Returns:
        The redacted text.
    """
    for secret in sorted((s for s in secrets if s), key=len, reverse=True):
        text = text.replace(secret, MASK)
    return text


def run_command(command, name, shell="/bin/bash", secrets=()):
    """Execute a shell command of a job.

    The command is run with the shell option pipefail, so that the
    exit status of a pipeline is non-zero when any of its commands
    fails, not only when the last command fails. The output of the
    command (stdout and stderr) is logged at debug level and collected.
    Output that is not valid in the locale's encoding is decoded with
    replacement characters.

    Args:
        command (str) : The shell command to execute.
        name (str)    : The name of the job the command belongs to.
        shell (str)   : The shell to execute the command with. It must
                        support `-o pipefail`.
        secrets (list): Strings that are masked when the command or its
                        output is logged.

    Returns:
        None when the command succeeded, otherwise the output of the
        command.
    """
    logging.info("Job '{0}': running {1}".format(name,
        redact(command, secrets)))
    output = []
    try:
        with subprocess.Popen([shell, "-o", "pipefail", "-c", command],
                stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
                universal_newlines=True, errors="replace") as process:
            while True:
                out_data = process.stdout.readline()
                if out_data == '':
                    break
                output.append(out_data)
                logging.debug(redact(out_data.rstrip(), secrets))
            return_code = process.wait()
    except OSError as why:
        logging.error("Job '{0}': could not start shell '{1}' ({2})".format(
            name, shell, why))
        return "could not start shell '{0}' ({1})".format(shell, why)
    if return_code == 0:
        return None
    logging.error("Job '{0}': command failed (exit status: {1})".format(name,
        return_code))
    text = "".join(output)
    for line in text.splitlines():
        logging.error("  {0}".format(redact(line, secrets)))
    return text
