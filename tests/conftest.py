from datetime import datetime

import pytest

from backinator.configuration import Configuration


@pytest.fixture()
def timestamp() -> datetime:
    return datetime(2026, 3, 14, 2, 30, 0)


@pytest.fixture()
def make_conf():
    def _make_conf(jobs=None, main=None, defaults=None) -> Configuration:
        configuration = {"version": "1.0", "main": dict(main or {}),
                         "defaults": dict(defaults or {})}
        configuration["main"].setdefault("jobs", list((jobs or {}).keys()))
        configuration.update(jobs or {})
        return Configuration.from_dict(configuration)

    return _make_conf
