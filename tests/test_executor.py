import logging

from backinator.executor import redact, run_command


def test_success_returns_none() -> None:
    assert run_command("true | true", "job") is None


def test_failure_in_first_stage_is_reported() -> None:
    assert run_command("false | true", "job") is not None


def test_failure_in_last_stage_is_reported() -> None:
    assert run_command("true | false", "job") is not None


def test_failure_returns_output(caplog) -> None:
    with caplog.at_level(logging.DEBUG):
        result = run_command("echo partial; echo broken >&2; exit 3", "db")

    assert result == "partial\nbroken\n"
    assert "Job 'db': command failed (exit status: 3)" in caplog.text


def test_undecodable_output_is_replaced() -> None:
    result = run_command("printf 'caf\\xe9\\n'; exit 1", "job")

    assert result is not None
    assert result.startswith("caf")


def test_missing_shell_is_a_failure(caplog) -> None:
    result = run_command("true", "job", shell="/no/such/bash")

    assert result is not None
    assert "/no/such/bash" in result
    assert "could not start shell" in caplog.text


def test_secrets_are_masked_in_log(caplog) -> None:
    with caplog.at_level(logging.DEBUG):
        result = run_command("echo --password=s3cret; exit 1", "db",
                             secrets=["--password=s3cret", "s3cret"])

    assert result == "--password=s3cret\n"
    assert "s3cret" not in caplog.text
    assert "****" in caplog.text


def test_redact_replaces_longest_secret_first() -> None:
    assert redact("a '--password=x y' b", ["x y", "'--password=x y'"]) == \
        "a **** b"
    assert redact("nothing here", ["", "secret"]) == "nothing here"
