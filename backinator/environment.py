# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

PROGRAM_VERSION = "1.0.0"

import argparse
import dateutil.parser

def parse_time(value):
    """Argument type for a reference time on the command line."""
    try:
        return dateutil.parser.parse(value)
    except (ValueError, OverflowError) as err:
        raise argparse.ArgumentTypeError(
                "invalid time '{0}' ({1})".format(value, err))


class Environment:
    """The operating environment of the program.

    An Environment object contains information about the operating
    environment.

    Attributes:
        conffile (str)      : The configuration file from the command
                              line, or None.
        conf_format (bool)  : Show the configuration file format.
        status (bool)       : Show the status of the last run.
        quiet (bool)        : Do not log to the console.
        log_level (str)     : The log level from the command line, or
                              None.
        time (datetime)     : The reference time for strftime directives,
                              or None.
        jobs (list)         : The jobs to run instead of the configured
                              jobs.
    """

    def __init__(self, args=None):
        """Constructor that parses the command line.

        Args:
            args (list): The arguments to parse, or None for sys.argv.
        """
        self.conffile = None
        self._parse_command_line(args)

    def _parse_command_line(self, args):
        """Parse command line arguments.

        The command line arguments that are parsed are added to the
        parsing operating environment instance.
        """
        parser = argparse.ArgumentParser(
                description="Run the configured backup jobs.")
        parser.add_argument("-f", "--conf-format", action="store_true",
                help="show help about the configuration file format and exit")
        parser.add_argument("-v", "--version", action="version",
                version="%(prog)s v" + PROGRAM_VERSION)
        parser.add_argument("-c", "--config", dest="conffile",
                default=self.conffile,
                help="the configuration file (default: /etc/backinator.conf,"
                    " then ./backinator.conf)")
        parser.add_argument("-q", "--quiet", action="store_true",
                help="do not log to the console")
        parser.add_argument("-l", "--log-level", dest="log_level",
                choices=["debug", "info", "warning", "error", "critical"],
                help="the lowest level of messages to log")
        parser.add_argument("-t", "--time", type=parse_time,
                help="the time to expand date and time directives with")
        parser.add_argument("-s", "--status", action="store_true",
                help="show the status of the last run and exit")
        parser.add_argument("jobs", nargs="*", metavar="JOB",
                help="a job to run instead of the configured jobs")
        parser.parse_args(args, namespace=self)
