# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import fcntl
import logging
import os
from backinator.backuperror import LockError

class RunLock:
    """An exclusive lock that prevents two runs of the program at the
    same time.

    The lock is an advisory lock on a lock file. It is used as a context
    manager; the lock is released when the context is left.
    """

    def __init__(self, path):
        """Constructor that takes the path of the lock file.

        Args:
            path (str): The lock file. It is created when it does not
                        exist.
        """
        self.path = path
        self._fp = None

    def acquire(self):
        """Acquire the lock.

        Raises:
            LockError: When another process holds the lock, or the lock
                       file can not be opened.
        """
        try:
            self._fp = open(self.path, "a+")
        except OSError as err:
            raise LockError("Could not open lock file '{0}' ({1})".format(
                self.path, err.strerror))
        try:
            fcntl.flock(self._fp, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            self._fp.close()
            self._fp = None
            raise LockError("Another backup is running (lock file '{0}')".
                    format(self.path))
        self._fp.seek(0)
        self._fp.truncate()
        self._fp.write("{0}\n".format(os.getpid()))
        self._fp.flush()
        logging.debug("Acquired lock '{0}'".format(self.path))

    def release(self):
        """Release the lock, when it is held."""
        if self._fp is None:
            return
        fcntl.flock(self._fp, fcntl.LOCK_UN)
        self._fp.close()
        self._fp = None
        logging.debug("Released lock '{0}'".format(self.path))

    @property
    def locked(self):
        return self._fp is not None

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release()
