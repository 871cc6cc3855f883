# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import logging
import sys
from backinator.backuperror import BackupError
from backinator.configuration import Configuration
from backinator.environment import Environment
from backinator.jsoncoders import load_status, save_status
from backinator.lockfile import RunLock
from backinator.log import configure_logging
from backinator.runner import BackupRunner
from datetime import datetime

# Largest exit status that is reported for failed commands.
MAX_EXIT_STATUS = 255


def create_backup(conf, env):
    """Run the backup jobs of `conf`.

    Args:
        conf (Configuration): The program's configuration.
        env (Environment)   : The program's environment.

    Returns:
        The RunTally of the run.

    Raises:
        BackupError: When there was an error that ends the run.
    """
    started = datetime.now().replace(microsecond=0)
    runner = BackupRunner(conf, env.time)
    with RunLock(conf.get("main.lock_file", required=True)):
        tally = runner.run(runner.job_names(env.jobs))
    status_file = conf.get("main.status_file")
    if status_file is not None:
        try:
            save_status(status_file, env.time or started, tally)
        except OSError as err:
            logging.error("Could not write status file '{0}' ({1})".format(
                status_file, err.strerror or err))
    return tally


def print_status(conf):
    """Print the status of the last run."""
    status_file = conf.get("main.status_file", required=True)
    try:
        status = load_status(status_file)
    except (IOError, ValueError) as err:
        raise BackupError("Could not read status file '{0}' ({1})".format(
            status_file, err))
    print("Last run: {0}".format(status["timestamp"].isoformat()))
    for name, errors in status["jobs"].items():
        print("  {0}: {1} error(s)".format(name, errors))
    print("Total: {0} error(s)".format(status["errors"]))


def run(args=None):
    env = Environment(args)
    if (env.conf_format):
        Configuration.print_configuration_format()
        sys.exit(0)
    configure_logging(env.log_level or "info", env.quiet)
    try:
        conf = Configuration(Configuration.find_file(env.conffile))
        if env.status:
            print_status(conf)
            sys.exit(0)
        level = env.log_level or conf.get("main.log_level")
        try:
            configure_logging(level, env.quiet)
        except ValueError as err:
            logging.warning("{0}, using 'info'".format(err))
            configure_logging("info", env.quiet)
        tally = create_backup(conf, env)
    except BackupError as e:
        logging.critical("Backup incomplete due to error:")
        logging.critical("  {0}".format(e))
        sys.exit(e.exit_code)
    sys.exit(min(tally.total, MAX_EXIT_STATUS))


if __name__ == "__main__":
    run()
