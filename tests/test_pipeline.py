from pathlib import Path

from backinator.backupjob import create_job
from backinator.pipeline import Pipeline, compression_stage, split_options
from backinator.pipeline import stage


def test_split_options() -> None:
    assert split_options("-a --exclude='my dir'") == ["-a", "--exclude=my dir"]
    assert split_options("") == []
    assert split_options(None) == []
    assert split_options(["-a", 9]) == ["-a", "9"]


def test_stage_quotes_every_argument() -> None:
    assert stage("rsync", ["-a"], None, "/src; rm -rf /", "/dst") == \
        "rsync -a '/src; rm -rf /' /dst"


def test_pipeline_joins_and_redirects() -> None:
    pipeline = Pipeline("a", "b", "c").redirect("/tmp/out put")

    assert str(pipeline) == "a | b | c > '/tmp/out put'"


def test_compression_stage_creates_parent(make_conf, tmp_path: Path) -> None:
    target = tmp_path / "x" / "y" / "dump.gz"
    conf = make_conf(jobs={"svn": {"type": "svn", "dest": str(target),
                                   "gzip_opts": "-1"}})
    job = create_job(conf, "svn")

    result = compression_stage(job, str(target))

    assert result == "gzip -1 > {0}".format(target)
    assert (tmp_path / "x" / "y").is_dir()


def test_compression_stage_without_create(make_conf, tmp_path: Path) -> None:
    target = tmp_path / "x" / "dump.gz"
    conf = make_conf(jobs={"svn": {"type": "svn", "dest": str(target),
                                   "create_dest": False}},
                     main={"gzip_bin": "/usr/bin/pigz"})
    job = create_job(conf, "svn")

    assert compression_stage(job, str(target)) == \
        "/usr/bin/pigz -9 > {0}".format(target)
    assert not (tmp_path / "x").exists()
