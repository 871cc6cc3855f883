# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2015-2021 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import dateutil.parser
import json
from datetime import datetime

class TimestampEncoder(json.JSONEncoder):
    """Custom JSON encoder that encodes datetime objects as their
    ISO-8601 string.
    """

    def default(self, obj):
        """Encoding function.
        """
        if isinstance(obj, datetime):
            return obj.isoformat()
        return json.JSONEncoder.default(self, obj)


def decode_status_json(dct):
    """Object hook for decoding the run status from JSON. In the JSON
    file, the timestamp is a string. This is converted to a datetime
    object.

    Args:
        dct: The dictionary as decoded by the default decoder.

    Returns:
        A dictionary with the timestamp as a datetime object.
    """
    if 'timestamp' in dct:
        dct['timestamp'] = dateutil.parser.parse(dct['timestamp'])
    return dct


def save_status(path, timestamp, tally):
    """Save the status of a run to the file `path`.

    Args:
        path (str)          : The status file.
        timestamp (datetime): The time the run started.
        tally (RunTally)    : The errors of the run.
    """
    with open(path, "w") as fp:
        json.dump({"timestamp": timestamp, "jobs": tally.jobs,
            "errors": tally.total}, fp, indent=4, cls=TimestampEncoder)


def load_status(path):
    """Load the status of the last run from the file `path`.

    Returns:
        A dictionary with the timestamp, the errors per job and the total
        number of errors.
    """
    with open(path, "r") as fp:
        return json.load(fp, object_hook=decode_status_json)
