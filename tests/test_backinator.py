import json
from pathlib import Path

import pytest

from backinator.backinator import run


def _write_conf(tmp_path: Path, jobs: dict, **main) -> str:
    main.setdefault("jobs", list(jobs))
    main.setdefault("lock_file", str(tmp_path / "backinator.lock"))
    configuration = {"version": "1.0", "main": main}
    configuration.update(jobs)
    conf_file = tmp_path / "backinator.conf"
    conf_file.write_text(json.dumps(configuration))
    return str(conf_file)


def _touch_job(tmp_path: Path, marker: str, binary: str = "true") -> dict:
    return {"type": "rsync", "rsync_bin": binary, "src": "/nonexistent",
            "dest": str(tmp_path / "dest"),
            "pre_cmd": "touch {0}".format(tmp_path / marker)}


def test_exit_status_is_error_count(tmp_path: Path) -> None:
    status_file = tmp_path / "status.json"
    conf_file = _write_conf(tmp_path, {
        "a": _touch_job(tmp_path, "a", "false"),
        "b": _touch_job(tmp_path, "b", "false"),
        "c": _touch_job(tmp_path, "c")}, status_file=str(status_file))

    with pytest.raises(SystemExit) as exit_info:
        run(["-q", "-c", conf_file, "-t", "2026-03-14T02:30:00"])

    assert exit_info.value.code == 2
    status = json.loads(status_file.read_text())
    assert status == {"timestamp": "2026-03-14T02:30:00",
                      "jobs": {"a": 1, "b": 1, "c": 0}, "errors": 2}


def test_success_exits_zero(tmp_path: Path) -> None:
    conf_file = _write_conf(tmp_path, {"a": _touch_job(tmp_path, "a")})

    with pytest.raises(SystemExit) as exit_info:
        run(["-q", "-c", conf_file])

    assert exit_info.value.code == 0
    assert (tmp_path / "a").exists()


def test_command_line_jobs_override(tmp_path: Path) -> None:
    conf_file = _write_conf(tmp_path, {"a": _touch_job(tmp_path, "a"),
                                       "b": _touch_job(tmp_path, "b")})

    with pytest.raises(SystemExit):
        run(["-q", "-c", conf_file, "b"])

    assert not (tmp_path / "a").exists()
    assert (tmp_path / "b").exists()


def test_unknown_type_exits_ten(tmp_path: Path) -> None:
    bad = _touch_job(tmp_path, "bad")
    bad["type"] = "ftp"
    conf_file = _write_conf(tmp_path, {"good": _touch_job(tmp_path, "good"),
                                       "bad": bad})

    with pytest.raises(SystemExit) as exit_info:
        run(["-q", "-c", conf_file])

    assert exit_info.value.code == 10
    assert (tmp_path / "good").exists()
    assert not (tmp_path / "bad").exists()


def test_stop_on_error_exits_500(tmp_path: Path) -> None:
    first = _touch_job(tmp_path, "first", "false")
    first["stop_on_error"] = True
    conf_file = _write_conf(tmp_path, {"first": first,
                                       "second": _touch_job(tmp_path, "second")})

    with pytest.raises(SystemExit) as exit_info:
        run(["-q", "-c", conf_file])

    assert exit_info.value.code == 500
    assert (tmp_path / "first").exists()
    assert not (tmp_path / "second").exists()


def test_missing_required_value_exits_one(tmp_path: Path) -> None:
    conf_file = _write_conf(tmp_path, {"a": {"type": "rsync"}})

    with pytest.raises(SystemExit) as exit_info:
        run(["-q", "-c", conf_file])

    assert exit_info.value.code == 1


def test_held_lock_exits_two(tmp_path: Path) -> None:
    from backinator.lockfile import RunLock

    conf_file = _write_conf(tmp_path, {"a": _touch_job(tmp_path, "a")})

    with RunLock(str(tmp_path / "backinator.lock")):
        with pytest.raises(SystemExit) as exit_info:
            run(["-q", "-c", conf_file])

    assert exit_info.value.code == 2
    assert not (tmp_path / "a").exists()


def test_status_prints_last_run(tmp_path: Path, capsys) -> None:
    status_file = tmp_path / "status.json"
    status_file.write_text(json.dumps({"timestamp": "2026-03-14T02:30:00",
                                       "jobs": {"a": 0, "b": 3},
                                       "errors": 3}))
    conf_file = _write_conf(tmp_path, {}, status_file=str(status_file))

    with pytest.raises(SystemExit) as exit_info:
        run(["-q", "-c", conf_file, "-s"])

    assert exit_info.value.code == 0
    out = capsys.readouterr().out
    assert "Last run: 2026-03-14T02:30:00" in out
    assert "  b: 3 error(s)" in out
    assert "Total: 3 error(s)" in out


def test_unwritable_status_file_keeps_exit_status(tmp_path: Path) -> None:
    conf_file = _write_conf(
        tmp_path, {"a": _touch_job(tmp_path, "a", "false")},
        status_file=str(tmp_path / "missing" / "status.json"))

    with pytest.raises(SystemExit) as exit_info:
        run(["-q", "-c", conf_file])

    assert exit_info.value.code == 1
    assert (tmp_path / "a").exists()


def test_missing_shell_counts_as_failures(tmp_path: Path) -> None:
    conf_file = _write_conf(tmp_path, {"a": _touch_job(tmp_path, "a")},
                            shell="/no/such/bash")

    with pytest.raises(SystemExit) as exit_info:
        run(["-q", "-c", conf_file])

    assert exit_info.value.code == 2
