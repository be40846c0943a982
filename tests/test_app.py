"""Tests for the command-line driver."""

import io
from pathlib import Path
from unittest.mock import patch

import pytest

from isonline.app import (
    EXIT_CONFIG_ERROR,
    EXIT_OFFLINE,
    EXIT_OK,
    RoundResult,
    build_parser,
    format_report,
    main,
    merge_args,
    run_round,
)
from isonline.checker import TcpPortCheck
from isonline.configuration import DEFAULT_CONFIG
from isonline.models import CheckConfig


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, reset_global_pool) -> None:
    """Run every test in an empty directory with a fresh global pool."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ISONLINE_CONFIG", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)


def test_format_report_lines() -> None:
    """Each target gets exactly one line, in input order."""
    result = RoundResult(resolved={"a", "b"}, online={"a"})

    lines = list(format_report(["a", "b", "c"], result, 22, color=False))

    assert lines == [
        "a:22 is online",
        "b:22 is offline",
        "c could not be resolved",
    ]


def test_format_report_color() -> None:
    """Coloured output still names the status."""
    result = RoundResult(resolved={"a"}, online={"a"})

    (line,) = format_report(["a"], result, 80, color=True)

    assert line.startswith("a:80 is ")
    assert "online" in line


def test_round_result_exit_codes() -> None:
    """--fail turns any offline target into exit status 1."""
    result = RoundResult(resolved={"a", "b"}, online={"a"})

    assert result.all_online(["a"]) is True
    assert result.all_online(["a", "b"]) is False
    assert result.exit_code(["a", "b"], fail=False) == EXIT_OK
    assert result.exit_code(["a", "b"], fail=True) == EXIT_OFFLINE
    assert result.exit_code(["a"], fail=True) == EXIT_OK


def test_run_round_against_loopback(pool, open_port: int) -> None:
    """A round reports resolved and online names separately."""
    check = TcpPortCheck(CheckConfig(port=open_port), pool=pool)

    result = run_round(["127.0.0.1", "not-a-real-host-xyz.invalid"], check, pool=pool)

    assert result.resolved == {"127.0.0.1"}
    assert result.online == {"127.0.0.1"}


def test_merge_args_flags() -> None:
    """Flags override the file configuration."""
    args = build_parser().parse_args(["-p", "80", "-t", "250", "-6", "--all", "--workers", "8", "--no-color", "-vv"])

    merged = merge_args(DEFAULT_CONFIG, args)

    assert merged["port"] == 80
    assert merged["timeout_ms"] == 250
    assert merged["family"] == "v6"
    assert merged["strategy"] == "all"
    assert merged["workers"] == 8
    assert merged["color"] is False
    assert merged["log_level"] == "DEBUG"


def test_merge_args_both_family_flags() -> None:
    """-4 together with -6 means both families."""
    args = build_parser().parse_args(["-4", "-6"])

    assert merge_args(dict(DEFAULT_CONFIG, family="v4"), args)["family"] == "both"


def test_merge_args_keeps_file_values() -> None:
    """Without flags the file configuration is used as is."""
    args = build_parser().parse_args([])
    config = dict(DEFAULT_CONFIG, port=443, family="v4")

    assert merge_args(config, args) == config


def test_main_online(open_port: int, capsys: pytest.CaptureFixture) -> None:
    """An open loopback port is reported online and exits 0."""
    code = main(["-p", str(open_port), "--no-color", "-f", "127.0.0.1"])

    assert code == EXIT_OK
    assert capsys.readouterr().out.splitlines() == [f"127.0.0.1:{open_port} is online"]


def test_main_offline_and_unresolved(refused_port: int, capsys: pytest.CaptureFixture) -> None:
    """Offline and unresolvable targets are reported distinctly, and -f exits 1."""
    code = main(["-p", str(refused_port), "--no-color", "-f", "127.0.0.1", "not-a-real-host-xyz.invalid"])

    assert code == EXIT_OFFLINE
    assert capsys.readouterr().out.splitlines() == [
        f"127.0.0.1:{refused_port} is offline",
        "not-a-real-host-xyz.invalid could not be resolved",
    ]


def test_main_quiet(refused_port: int, capsys: pytest.CaptureFixture) -> None:
    """--quiet prints nothing but keeps the exit status."""
    code = main(["-q", "-f", "-p", str(refused_port), "127.0.0.1"])

    assert code == EXIT_OFFLINE
    assert capsys.readouterr().out == ""


def test_main_expands_subnets(capsys: pytest.CaptureFixture) -> None:
    """Subnets are expanded into one line per host address."""
    with patch("isonline.checker.probe_port") as mock_probe:
        from isonline.models import ProbeOutcome
        mock_probe.return_value = ProbeOutcome.OPEN
        code = main(["--no-color", "192.0.2.0/30"])

    assert code == EXIT_OK
    assert capsys.readouterr().out.splitlines() == [
        "192.0.2.1:22 is online",
        "192.0.2.2:22 is online",
    ]


def test_main_reads_stdin(open_port: int, capsys: pytest.CaptureFixture, monkeypatch: pytest.MonkeyPatch) -> None:
    """Targets come from stdin when none are given."""
    monkeypatch.setattr("sys.stdin", io.StringIO("127.0.0.1\n\n"))

    code = main(["-p", str(open_port), "--no-color"])

    assert code == EXIT_OK
    assert capsys.readouterr().out.splitlines() == [f"127.0.0.1:{open_port} is online"]


def test_main_wait_repeats_until_online(capsys: pytest.CaptureFixture) -> None:
    """--wait runs rounds until every target is online."""
    from isonline.models import ProbeOutcome

    outcomes = iter([ProbeOutcome.CLOSED, ProbeOutcome.ERROR, ProbeOutcome.OPEN])

    with patch("isonline.checker.probe_port", side_effect=lambda *args: next(outcomes)), \
            patch("isonline.app.time.sleep") as mock_sleep:
        code = main(["-w", "--no-color", "192.0.2.1"])

    assert code == EXIT_OK
    assert mock_sleep.call_count == 2
    assert capsys.readouterr().out.splitlines() == [
        "192.0.2.1:22 is offline",
        "192.0.2.1:22 is offline",
        "192.0.2.1:22 is online",
    ]


def test_main_config_file(tmp_path: Path, open_port: int, capsys: pytest.CaptureFixture) -> None:
    """Settings are read from the configuration file."""
    (tmp_path / "isonline.yaml").write_text(f"port: {open_port}\ncolor: false\n")

    code = main(["127.0.0.1"])

    assert code == EXIT_OK
    assert capsys.readouterr().out.splitlines() == [f"127.0.0.1:{open_port} is online"]


def test_main_configuration_error(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    """A broken configuration aborts before any probing."""
    (tmp_path / "isonline.yaml").write_text("port: [1, 2\n")

    with patch("isonline.checker.probe_port") as mock_probe:
        code = main(["127.0.0.1"])

    assert code == EXIT_CONFIG_ERROR
    mock_probe.assert_not_called()
    assert capsys.readouterr().out == ""


def test_main_negative_workers() -> None:
    """A negative pool size is a configuration error."""
    assert main(["--workers=-1", "127.0.0.1"]) == EXIT_CONFIG_ERROR
