# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import glob
import logging
import os
import shlex

def expand_time(template, timestamp):
    """Expand the strftime directives in `template`.

    Args:
        template (str)     : The string with strftime directives.
        timestamp (datetime): The time to expand the directives with.

    Returns:
        The expanded string, or None when `template` is None.
    """
    if template is None:
        return None
    return timestamp.strftime(template)


def expand_paths(patterns, timestamp):
    """Expand a list of path patterns.

    Each pattern is first expanded with strftime directives and then
    with glob patterns, like a shell would do. The matches of a single
    pattern are sorted. A pattern that does not match anything expands
    to itself.

    Args:
        patterns (list)     : The path patterns to expand.
        timestamp (datetime): The time to expand strftime directives
                              with.

    Returns:
        A list with the expanded paths.
    """
    paths = []
    for pattern in patterns:
        pattern = expand_time(pattern, timestamp)
        matches = sorted(glob.glob(pattern))
        if matches:
            paths.extend(matches)
        else:
            paths.append(pattern)
    return paths


def expand_sources(patterns, timestamp):
    """Expand a list of path patterns into a string for a command line.

    Args:
        patterns (list)     : The path patterns to expand.
        timestamp (datetime): The time to expand strftime directives
                              with.

    Returns:
        The quoted expanded paths, separated by spaces. An empty list of
        patterns results in an empty string.
    """
    return " ".join(shlex.quote(p) for p in expand_paths(patterns, timestamp))


def parse_mode(mode):
    """Convert a permission mode from the configuration into an int.

    Args:
        mode: The mode as an int, or as an octal string (e.g. "0755").

    Returns:
        The mode as an int.

    Raises:
        ValueError: When `mode` is not an octal number.
    """
    if isinstance(mode, int):
        return mode
    return int(str(mode), 8)


def make_dirs(path, mode=0o755):
    """Create the directory `path` and all its missing parents.

    It is not an error when the directory already exists.

    Args:
        path (str): The directory to create.
        mode (int): The permission mode of created directories.

    Returns:
        True when the directory exists after the call, False otherwise.
    """
    try:
        os.makedirs(path, mode, exist_ok=True)
    except OSError as why:
        logging.error("Could not create directory '{0}' ({1})".format(path,
            why))
    return os.path.isdir(path)
