# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import logging
import os
import shlex
import subprocess
from backinator.backuperror import ConfigurationError, DirectoryError
from backinator.backuperror import DiscoveryError
from backinator.backuperror import UnknownJobTypeError
from backinator.functions import expand_sources, make_dirs, parse_mode
from backinator.pipeline import Pipeline, compression_stage, split_options
from backinator.pipeline import stage
from enum import Enum

# Configuration value that leaves out an optional tool option.
NONE_SENTINEL = "none"

# Configuration value that selects all databases on a server.
ALL_SENTINEL = "all"


class JobType(Enum):
    """Enumeration of the types of backup jobs.

    The value of a member is the job type as it is written in the
    configuration file.
    """

    SYNC = "rsync"
    ARCHIVE = "tar"
    DB_DUMP = "mysql"
    REPO_DUMP = "svn"
    DIRSERVER_DUMP = "ldap"
    REALM_DUMP = "kerberos"

    @classmethod
    def from_string(cls, name):
        """Return the enum member given the job type from the
        configuration.

        Args:
            name (str): The job type.

        Returns:
            The job type as an enum member.

        Raises:
            ValueError: When the name does not correspond to a member.
        """
        for member in cls:
            if member.value == str(name).strip().lower():
                return member
        raise ValueError("Illegal name ({0}) for enumeration 'JobType'".
                format(name))


class BackupJob:
    """Base for a single backup job.

    A job turns its configuration into the shell commands that make the
    backup. Every type of job is a subclass that implements
    `commands`. The generic settings of a job are read when the job is
    created; type specific settings are read while the commands are
    built.

    Attributes:
        name (str)          : The job's name.
        dest (str)          : The destination template.
        pre_cmd (str)       : The command to run before the backup, or
                              None.
        post_cmd (str)      : The command to run after the backup, or
                              None.
        stop_on_error (bool): Stop the run when a command fails.
        create_dest (bool)  : Create the destination directories.
    """

    job_type = None

    def __init__(self, conf, name):
        """Constructor that reads the generic settings of job `name`.

        Args:
            conf (Configuration): The program's configuration.
            name (str)          : The job's name.

        Raises:
            ConfigurationError: When the job has no destination.
        """
        self.name = name
        self._conf = conf
        self.dest = self.get("dest", required=True)
        self.pre_cmd = self.get("pre_cmd")
        self.post_cmd = self.get("post_cmd")
        self.stop_on_error = conf.get_flag(self._key("stop_on_error"), False)
        self.create_dest = conf.get_flag(self._key("create_dest"), True)

    def commands(self, destination, timestamp):
        """Build the commands that make the backup.

        Args:
            destination (str)   : The destination, with its strftime
                                  directives already expanded.
            timestamp (datetime): The time the job started.

        Returns:
            A list with the shell commands, in the order in which they
            must be executed.
        """
        raise NotImplementedError

    def get(self, name, fallback_key=None, **kwargs):
        """Get the job's parameter `name` from the configuration."""
        return self._conf.get(self._key(name), fallback_key, **kwargs)

    def binary(self, tool):
        """The binary of `tool`, from the job or else from main."""
        return self.get(tool + "_bin", "main." + tool + "_bin", required=True)

    def options(self, tool):
        """The options of `tool`, from the job or else from defaults,
        split into separate arguments.
        """
        return split_options(self.get(tool + "_opts", "defaults." + tool +
            "_opts", default=""))

    def optional(self, name):
        """Get an optional parameter, where the sentinel 'none' counts
        as not set.
        """
        value = self.get(name)
        if value is None or str(value).strip().lower() == NONE_SENTINEL:
            return None
        return str(value)

    def prepare_dir(self, path):
        """Create directory `path` when the job creates its destination.

        Raises:
            DirectoryError: When the directory could not be created.
        """
        if not self.create_dest:
            return
        try:
            mode = parse_mode(self.get("dir_mode", "defaults.dir_mode"))
        except ValueError as err:
            raise ConfigurationError("Job '{0}': invalid dir_mode ({1})".
                    format(self.name, err))
        if not make_dirs(path, mode):
            raise DirectoryError("Job '{0}': could not create directory "
                    "'{1}'".format(self.name, path))

    def prepare_parent(self, path):
        """Create the parent directory of `path` when the job creates
        its destination.
        """
        parent = os.path.dirname(path)
        if parent:
            self.prepare_dir(parent)

    def secrets(self):
        """Configured values that must not appear in the log."""
        return []

    def _key(self, name):
        return "{0}.{1}".format(self.name, name)


def prefixed_destination(destination, prefix):
    """Insert `prefix` in front of the file name of `destination`.

    For example, prefix 'db' turns '/backup/dump.sql.gz' into
    '/backup/db-dump.sql.gz'.
    """
    directory, base = os.path.split(destination)
    return os.path.join(directory, "{0}-{1}".format(prefix, base))


class SyncJob(BackupJob):
    """A job that synchronizes directories with rsync."""

    job_type = JobType.SYNC

    def commands(self, destination, timestamp):
        sources = expand_sources(self.get("src", want_list=True), timestamp)
        if not sources:
            logging.warning("Job '{0}': no sources to synchronize".format(
                self.name))
            return []
        self.prepare_dir(destination)
        return [" ".join([stage(self.binary("rsync"), self.options("rsync")),
            sources, stage(destination)])]


class ArchiveJob(BackupJob):
    """A job that archives files and directories with tar."""

    job_type = JobType.ARCHIVE

    def commands(self, destination, timestamp):
        sources = expand_sources(self.get("src", want_list=True), timestamp)
        if not sources:
            logging.warning("Job '{0}': no sources to archive".format(
                self.name))
            return []
        self.prepare_parent(destination)
        return [" ".join([stage(self.binary("tar"), self.options("tar"),
            destination), sources])]


class DatabaseDumpJob(BackupJob):
    """A job that dumps MySQL databases with mysqldump.

    Every database is dumped into its own compressed file. The name of
    the database is put in front of the destination's file name.
    """

    job_type = JobType.DB_DUMP

    def commands(self, destination, timestamp):
        credentials = self._credentials()
        dump_bin = self.binary("mysqldump")
        dump_opts = self.options("mysqldump")
        commands = []
        for database in self.databases():
            target = prefixed_destination(destination, database)
            commands.append(str(Pipeline(
                stage(dump_bin, credentials, dump_opts, database),
                compression_stage(self, target))))
        return commands

    def databases(self):
        """The databases to dump.

        Returns:
            The configured databases, or all databases on the server
            when the configuration says 'all'.

        Raises:
            DiscoveryError: When the databases could not be queried.
        """
        databases = self.get("databases", want_list=True,
                default=ALL_SENTINEL)
        if [str(d).strip().lower() for d in databases] == [ALL_SENTINEL]:
            return self.discover_databases()
        return [str(d) for d in databases]

    def discover_databases(self):
        """Query the server for all its databases.

        Raises:
            DiscoveryError: When the query fails.
        """
        exclude = self.get("exclude_databases", want_list=True,
                default=["information_schema", "performance_schema"])
        query = stage(self.binary("mysql"), self._credentials(), "-N", "-B",
                "-e", "SHOW DATABASES")
        logging.debug("Job '{0}': querying databases".format(self.name))
        try:
            result = subprocess.run(query, shell=True, stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE, universal_newlines=True,
                    errors="replace")
        except OSError as why:
            raise DiscoveryError("Job '{0}': could not query databases ({1})".
                    format(self.name, why))
        if result.returncode != 0:
            raise DiscoveryError("Job '{0}': could not query databases "
                    "(exit status: {1}) {2}".format(self.name,
                        result.returncode, result.stderr.strip()))
        return [d for d in result.stdout.split() if d not in exclude]

    def secrets(self):
        password = self.optional("password")
        if password is None:
            return []
        return [shlex.quote("--password=" + password), password]

    def _credentials(self):
        arguments = []
        for name in ("user", "password", "host"):
            value = self.optional(name)
            if value is not None:
                arguments.append("--{0}={1}".format(name, value))
        return arguments


class RepositoryDumpJob(BackupJob):
    """A job that dumps a Subversion repository with svnadmin."""

    job_type = JobType.REPO_DUMP

    def commands(self, destination, timestamp):
        repository = self.get("repo", required=True)
        return [str(Pipeline(
            stage(self.binary("svnadmin"), "dump", self.options("svnadmin"),
                repository),
            compression_stage(self, destination)))]


class DirectoryDumpJob(BackupJob):
    """A job that dumps an LDAP directory with slapcat.

    The directory is dumped into a temporary file first. Only when the
    dump succeeds, the file is compressed into the destination. The
    temporary file is always removed.
    """

    job_type = JobType.DIRSERVER_DUMP

    def commands(self, destination, timestamp):
        tmp_file = self.temp_file(timestamp)
        dump = stage(self.binary("slapcat"), self.options("slapcat"), "-l",
                tmp_file)
        compress = str(Pipeline(stage("cat", tmp_file),
            compression_stage(self, destination)))
        return ["{0} && {1}; status=$?; rm -f {2}; exit $status".format(dump,
            compress, shlex.quote(tmp_file))]

    def temp_file(self, timestamp):
        """The temporary file to dump the directory into."""
        tmp_dir = self.get("tmp_dir", "main.tmp_dir", required=True)
        return os.path.join(tmp_dir, "backinator-{0}-{1}.ldif".format(
            self.name, timestamp.strftime("%Y%m%d%H%M%S")))


class RealmDumpJob(BackupJob):
    """A job that dumps Kerberos realms with kdb5_util.

    Every realm is dumped into its own compressed file. The name of the
    realm is put in front of the destination's file name.
    """

    job_type = JobType.REALM_DUMP

    def commands(self, destination, timestamp):
        realms = [str(r) for r in self.get("realms", want_list=True,
            required=True)]
        dump_bin = self.binary("kdb5_util")
        dump_opts = self.options("kdb5_util")
        commands = []
        for realm in realms:
            target = prefixed_destination(destination, realm)
            commands.append(str(Pipeline(
                stage(dump_bin, "-r", realm, dump_opts, "dump"),
                compression_stage(self, target))))
        return commands


JOB_CLASSES = {cls.job_type: cls for cls in (SyncJob, ArchiveJob,
    DatabaseDumpJob, RepositoryDumpJob, DirectoryDumpJob, RealmDumpJob)}


def create_job(conf, name):
    """Create the job `name` from the configuration.

    Args:
        conf (Configuration): The program's configuration.
        name (str)          : The job's name.

    Returns:
        The job, as an instance of the subclass of BackupJob for the
        job's type.

    Raises:
        ConfigurationError : When the job has no type or destination.
        UnknownJobTypeError: When the job's type is not known.
    """
    type_name = conf.get("{0}.type".format(name), required=True)
    try:
        job_type = JobType.from_string(type_name)
    except ValueError:
        raise UnknownJobTypeError("Job '{0}' has unknown type '{1}'".format(
            name, type_name))
    return JOB_CLASSES[job_type](conf, name)
