# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import json
import os
import tempfile
import textwrap
from backinator.backuperror import ConfigurationError

class Configuration:
    """Configuration for the backup program.

    The configuration is read from a json-configuration file. This
    configuration file is versioned. The program only supports
    configuration files in the version 1.x format.

    Parameters are addressed with dotted keys of the form
    `<section>.<name>`. The section `main` holds the global settings,
    the section `defaults` holds tool options that are used when a job
    does not override them, and every job has a section named after the
    job.

    Attributes:
        version_major (str): The major part of the configuration's
                             version.
        version_minor (str): The minor part of the configuration's
                             version.
    """

    # Values used when the configuration file does not set them.
    DEFAULTS = {
        "main.jobs": [],
        "main.log_level": "info",
        "main.lock_file": os.path.join(tempfile.gettempdir(),
            "backinator.lock"),
        "main.shell": "/bin/bash",
        "main.tmp_dir": tempfile.gettempdir(),
        "main.rsync_bin": "rsync",
        "main.tar_bin": "tar",
        "main.mysqldump_bin": "mysqldump",
        "main.mysql_bin": "mysql",
        "main.svnadmin_bin": "svnadmin",
        "main.slapcat_bin": "slapcat",
        "main.kdb5_util_bin": "kdb5_util",
        "main.gzip_bin": "gzip",
        "defaults.rsync_opts": "-a --delete",
        "defaults.tar_opts": "-czf",
        "defaults.mysqldump_opts": "--single-transaction",
        "defaults.svnadmin_opts": "--quiet",
        "defaults.slapcat_opts": "",
        "defaults.kdb5_util_opts": "",
        "defaults.gzip_opts": "-9",
        "defaults.dir_mode": "0755",
    }

    _TRUE_STRINGS = ("yes", "true", "on", "1")
    _FALSE_STRINGS = ("no", "false", "off", "0")

    def __init__(self, conf_file):
        """Constructor that takes the path to the configuration file as
        argument.

        The configuration is loaded from the json configuration file at
        `conf_file`.

        Args:
            conf_file (str): Path to the configuration file.

        Raises:
            ConfigurationError: When the configuration file does not
                                exist or could otherwise not be opened,
                                or when the configuration file could not
                                be parsed.
        """
        self.conf_file = conf_file
        try:
            with open(conf_file, "r") as fp:
                self._configuration = json.load(fp)
            self._extract_version()
            self._check_version()
        except IOError as err:
            raise ConfigurationError(
                    "Could not open configuration file '{0}' ({1})".format(
                        err.filename, err.strerror))
        except ValueError as err:
            raise ConfigurationError("Could not parse configuration ({0})".
                    format(err))

    @classmethod
    def from_dict(cls, configuration):
        """Create a configuration from an already decoded dictionary.

        Args:
            configuration (dict): The configuration, laid out as the
                                  json configuration file.

        Returns:
            The configuration.
        """
        conf = cls.__new__(cls)
        conf.conf_file = None
        conf._configuration = configuration
        conf._extract_version()
        conf._check_version()
        return conf

    @classmethod
    def find_file(cls, conf_file=None):
        """Find the configuration file to use.

        An explicitly given file is always used. Otherwise the file
        /etc/backinator.conf is used when it exists, and else the file
        backinator.conf in the current directory.

        Args:
            conf_file (str): The configuration file from the command
                             line, or None.

        Returns:
            The path of the configuration file.
        """
        if conf_file is not None:
            return conf_file
        for candidate in ("/etc/backinator.conf",
                os.path.join(os.getcwd(), "backinator.conf")):
            if os.path.isfile(candidate):
                return candidate
        raise ConfigurationError("No configuration file found (tried "
                "/etc/backinator.conf and ./backinator.conf)")

    def get(self, key, fallback_key=None, want_list=False, required=False,
            default=None):
        """Get the parameter `key` from the configuration.

        The lookup order is: `key` in the configuration file,
        `fallback_key` in the configuration file, the built-in default
        for `key`, the built-in default for `fallback_key` and finally
        `default`.

        Args:
            key (str)         : The dotted key to retrieve.
            fallback_key (str): The dotted key to use when `key` is not
                                set.
            want_list (bool)  : Always return a list, also when a single
                                value is configured.
            required (bool)   : Raise an error when there is no value.
            default           : The value to return when nothing is
                                found.

        Returns:
            The value corresponding to `key`.

        Raises:
            ConfigurationError: When `required` is set and the parameter
                                has no value.
        """
        value = self._lookup(key)
        if value is None and fallback_key is not None:
            value = self._lookup(fallback_key)
        if value is None:
            value = Configuration.DEFAULTS.get(key)
        if value is None and fallback_key is not None:
            value = Configuration.DEFAULTS.get(fallback_key)
        if value is None:
            if required:
                raise ConfigurationError(
                        "Missing required configuration parameter '{0}'".
                        format(key))
            value = default
        if want_list:
            if value is None:
                return []
            if not isinstance(value, list):
                return [value]
            return list(value)
        return value

    def get_flag(self, key, default=False):
        """Get the boolean parameter `key` from the configuration.

        Besides json booleans the strings yes/no, true/false, on/off and
        1/0 are accepted.

        Args:
            key (str)     : The dotted key to retrieve.
            default (bool): The value when the parameter is not set.

        Returns:
            The parameter as a bool.

        Raises:
            ConfigurationError: When the value is not a boolean.
        """
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in Configuration._TRUE_STRINGS:
            return True
        if text in Configuration._FALSE_STRINGS:
            return False
        raise ConfigurationError(
                "Configuration parameter '{0}' is not a boolean ({1})".
                format(key, value))

    def _lookup(self, key):
        section, _, name = key.partition(".")
        values = self._configuration.get(section)
        if not isinstance(values, dict):
            return None
        return values.get(name)

    def _extract_version(self):
        """Extract the version from the configuration into the
        attributes version_major and version_minor.

        Raises:
            ConfigurationError: When the configuration does not have a
                                version parameter, or when the version
                                parameter could not be split into two
                                separate strings.
        """
        try:
            version = self._configuration["version"]
            self.version_major, self.version_minor = version.split(".")
        except KeyError as err:
            raise ConfigurationError(
                    "Missing configuration parameter '{0}'".format(
                        err.args[0]))
        except (AttributeError, ValueError) as err:
            raise ConfigurationError(
                    "Error parsing configuration's version string ({0})".
                    format(err))

    def _check_version(self):
        """Check if the configuration format version is supported.

        Raises:
            ConfigurationError: When the configuration format version is
                                not supported.
        """
        try:
            if (int(self.version_major) == 1) and (int(self.version_minor) >= 0):
                # We have a supported version
                return
        except ValueError:
            pass
        raise ConfigurationError("Configuration file format not supported. "
                "Found version {0}, only supporting versions 1.x".
                format(self._configuration["version"]))

    @classmethod
    def print_configuration_format(cls):
        """Print the configuration file format.
        """
        print(textwrap.dedent("""\
            The configuration for the backup program is stored in a JSON-file.
            The file is versioned. This version of the program uses version
            1.0 of the configuration file. It is also compatible with any other
            1.x version of the configuration file.

            A sample version 1.0 configuration file looks as follows:

                {
                   "version": "1.0",
                   "main": {
                      "jobs": ["home", "mysql", "svn"],
                      "log_level": "info",
                      "lock_file": "/var/run/backinator.lock",
                      "status_file": "/var/lib/backinator/status.json"
                   },
                   "defaults": {
                      "rsync_opts": "-aH --delete",
                      "gzip_opts": "-9"
                   },
                   "home": {
                      "type": "rsync",
                      "src": ["/home/*"],
                      "dest": "/backup/home",
                      "stop_on_error": true
                   },
                   "mysql": {
                      "type": "mysql",
                      "user": "backup",
                      "password": "secret",
                      "databases": "all",
                      "dest": "/backup/mysql/%Y-%m-%d/dump.sql.gz"
                   },
                   "svn": {
                      "type": "svn",
                      "repo": "/var/svn/main",
                      "dest": "/backup/svn/main-%Y%m%d.dump.gz",
                      "pre_cmd": "logger starting svn dump",
                      "post_cmd": "find /backup/svn -mtime +14 -delete"
                   }
                }

            The configuration is contained in a single, unnamed JSON object. The
            object contains the following name/value pairs:
            - `version` : The string "1.0".
            - `main`    : The global settings: `jobs` (the jobs to run, in
                          order), `log_level`, `lock_file`, `status_file`,
                          `shell`, `tmp_dir` and the tool binaries
                          `rsync_bin`, `tar_bin`, `mysqldump_bin`,
                          `mysql_bin`, `svnadmin_bin`, `slapcat_bin`,
                          `kdb5_util_bin` and `gzip_bin`.
            - `defaults`: Tool options used when a job does not set them:
                          `rsync_opts`, `tar_opts`, `mysqldump_opts`,
                          `svnadmin_opts`, `slapcat_opts`,
                          `kdb5_util_opts`, `gzip_opts` and `dir_mode`.
            - <job>     : One object per job, named after the job.

            Every job contains the following name/value pairs:
            - `type`         : One of 'rsync', 'tar', 'mysql', 'svn', 'ldap'
                               or 'kerberos'.
            - `dest`         : The destination. It may contain strftime
                               directives (e.g. %Y-%m-%d), which are
                               expanded once when the job starts.
            - `pre_cmd`      : (optional) A shell command to run before the
                               backup. It may contain strftime directives.
            - `post_cmd`     : (optional) A shell command to run after the
                               backup. It may contain strftime directives.
            - `stop_on_error`: (optional) Stop the whole run when a command
                               of this job fails. Default false.
            - `create_dest`  : (optional) Create the destination directory.
                               Default true.

            A job can override any tool binary or tool option by setting
            it in its own object. Type specific name/value pairs are:
            - rsync, tar: `src`, a list of source paths. Glob patterns and
                          strftime directives are expanded.
            - mysql     : `user`, `password` and `host` (optional, the value
                          'none' omits the option), `databases` (a list, or
                          'all' to back up every database on the server) and
                          `exclude_databases`. Every database is dumped to
                          its own file, named <database>-<basename of dest>.
            - svn       : `repo`, the repository path.
            - ldap      : `tmp_dir` (optional), where the dump is written
                          before it is compressed.
            - kerberos  : `realms`, a list of realms. Every realm is dumped
                          to its own file, named <realm>-<basename of dest>.
            """))
