# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

class BackupError(Exception):
    """Base exception for the backup program.

    This exception is raised when an error occurs in the backup program
    that ends the run. It is derived for more specific errors. Each
    error carries the exit status the program terminates with.

    Attributes:
        exit_code (int): The process exit status for this error.
    """

    exit_code = 1

    def __init__(self, reason):
        """Constructor that takes the reason for the error as argument.

        Args:
            reason (str): The reason for raising the error.
        """
        super().__init__(reason)
        self._reason = reason

    def __str__(self):
        """String representation of the error."""
        return self._reason


class ConfigurationError(BackupError):
    """A required configuration value is missing, or the configuration
    file could not be read.
    """
    exit_code = 1


class DiscoveryError(BackupError):
    """The list of databases could not be queried from the server."""
    exit_code = 1


class DirectoryError(BackupError):
    """A destination directory could not be created."""
    exit_code = 1


class LockError(BackupError):
    """Another run holds the program's lock."""
    exit_code = 2


class UnknownJobTypeError(BackupError):
    """A job is configured with a type the program does not know."""
    exit_code = 10


class StopOnErrorError(BackupError):
    """A job that stops the run on errors had failing commands."""
    exit_code = 500
