from pathlib import Path

import pytest

from backinator.backuperror import LockError
from backinator.lockfile import RunLock


def test_second_lock_fails(tmp_path: Path) -> None:
    path = str(tmp_path / "run.lock")

    with RunLock(path) as lock:
        assert lock.locked
        with pytest.raises(LockError):
            RunLock(path).acquire()

    assert not lock.locked
    with RunLock(path):
        pass
