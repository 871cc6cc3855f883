# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import logging
from backinator.backuperror import StopOnErrorError
from backinator.backupjob import create_job
from backinator.executor import run_command
from backinator.functions import expand_time
from datetime import datetime

class RunTally:
    """The number of failed commands of a run.

    Attributes:
        jobs (dict): The number of failed commands per job, in the order
                     in which the jobs ran.
    """

    def __init__(self):
        self.jobs = {}

    def add(self, name, errors):
        """Record that job `name` finished with `errors` failed
        commands.
        """
        self.jobs[name] = self.jobs.get(name, 0) + errors

    @property
    def total(self):
        """The number of failed commands of all jobs."""
        return sum(self.jobs.values())


class BackupRunner:
    """Runs the backup jobs of a configuration.

    The jobs are run one after the other. For every job the commands are
    built and then executed one after the other. A failing command is
    counted, but does not end the job or the run, unless the job is
    configured to stop on errors.
    """

    def __init__(self, conf, timestamp=None, executor=run_command):
        """Constructor that takes the configuration of the run.

        Args:
            conf (Configuration): The program's configuration.
            timestamp (datetime): The time to expand the strftime
                                  directives of all jobs with, or None
                                  to use the time each job starts.
            executor (fnc)      : Function that executes a command. It
                                  takes the command, the job name, the
                                  shell and the secrets to mask, and
                                  returns None on success.
        """
        self._conf = conf
        self._timestamp = timestamp
        self._executor = executor
        self._shell = conf.get("main.shell", required=True)

    def job_names(self, override=None):
        """The names of the jobs to run.

        Args:
            override (list): Job names from the command line, or None.

        Returns:
            `override` when it is not empty, else the configured jobs.
        """
        if override:
            return list(override)
        return [str(j) for j in self._conf.get("main.jobs", want_list=True)]

    def build_commands(self, job, timestamp):
        """Build all commands of `job`, including its pre and post
        commands.

        The destination is expanded once, so that all files that the
        job writes share the same timestamp.

        Args:
            job (BackupJob)     : The job.
            timestamp (datetime): The time the job started.

        Returns:
            The list of commands, in order of execution.
        """
        destination = expand_time(job.dest, timestamp)
        commands = []
        if job.pre_cmd:
            commands.append(expand_time(job.pre_cmd, timestamp))
        commands.extend(job.commands(destination, timestamp))
        if job.post_cmd:
            commands.append(expand_time(job.post_cmd, timestamp))
        return commands

    def run_job(self, name):
        """Run the job `name`.

        Args:
            name (str): The job's name.

        Returns:
            The number of failed commands.

        Raises:
            UnknownJobTypeError: When the job's type is not known.
            StopOnErrorError   : When a command failed and the job is
                                 configured to stop on errors.
        """
        timestamp = self._timestamp or datetime.now().replace(microsecond=0)
        logging.info("===================================================")
        logging.info("Starting job '{0}'".format(name))
        job = create_job(self._conf, name)
        errors = 0
        secrets = job.secrets()
        for command in self.build_commands(job, timestamp):
            if self._executor(command, name, self._shell,
                    secrets) is not None:
                errors += 1
        logging.info("Finished job '{0}' with {1} error(s)".format(name,
            errors))
        if job.stop_on_error and errors:
            raise StopOnErrorError("Job '{0}' failed with {1} error(s), "
                    "stopping".format(name, errors))
        return errors

    def run(self, names):
        """Run the jobs `names` in order.

        Args:
            names (list): The names of the jobs.

        Returns:
            The RunTally of the run.
        """
        tally = RunTally()
        for name in names:
            tally.add(name, self.run_job(name))
        logging.info("Backup finished with {0} error(s)".format(tally.total))
        return tally
