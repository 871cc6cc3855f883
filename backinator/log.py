# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import logging
import logging.handlers
import os

# The handlers installed by configure_logging.
_handlers = []

def parse_level(level):
    """Convert a log level name (e.g. 'info') into a logging level.

    Raises:
        ValueError: When `level` is not a known level.
    """
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError("Unknown log level '{0}'".format(level))
    return value


def configure_logging(level="info", quiet=False, syslog=True):
    """Set up logging to the console and to the system log.

    Messages are written to stderr, unless `quiet` is set, and to the
    system log. Calling this function again replaces the handlers of a
    previous call.

    Args:
        level (str)  : The lowest level of the messages to log.
        quiet (bool) : Do not log to the console.
        syslog (bool): Log to the system log.
    """
    threshold = parse_level(level)
    root = logging.getLogger()
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    del _handlers[:]

    if not quiet:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s: %(message)s"))
        _handlers.append(console)
    if syslog:
        if os.path.exists("/dev/log"):
            system = logging.handlers.SysLogHandler(address="/dev/log")
        else:
            system = logging.handlers.SysLogHandler()
        system.setFormatter(logging.Formatter(
            "backinator: %(levelname)s %(message)s"))
        _handlers.append(system)

    for handler in _handlers:
        root.addHandler(handler)
    root.setLevel(threshold)
