"""Shared pytest fixtures for the firewall bootstrap tests."""

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest
from click.testing import CliRunner

import firewall_fail2ban_setup as setup


class RecordingRunner:
    """Stands in for run_command: records every command, never touches the host."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.envs: List[Optional[Dict[str, str]]] = []
        self.failures: Dict[Tuple[str, ...], BaseException] = {}
        self.outputs: Dict[Tuple[str, ...], str] = {}
        self.timeouts: List[Optional[int]] = []
        self.sleeps: List[Tuple[int, float]] = []

    def fail(self, *prefix: str, error: Optional[BaseException] = None) -> None:
        self.failures[prefix] = error or subprocess.CalledProcessError(
            1, list(prefix), stderr="simulated failure"
        )

    def respond(self, *prefix: str, stdout: str) -> None:
        self.outputs[prefix] = stdout

    def starting_with(self, *prefix: str) -> List[List[str]]:
        return [cmd for cmd in self.calls if tuple(cmd[: len(prefix)]) == prefix]

    def index_of(self, cmd: List[str]) -> int:
        return self.calls.index(cmd)

    def sleep(self, seconds: float) -> None:
        """Record a pause together with how many commands ran before it."""
        self.sleeps.append((len(self.calls), seconds))

    def __call__(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> subprocess.CompletedProcess:
        self.calls.append(list(cmd))
        self.envs.append(env)
        self.timeouts.append(timeout)
        for prefix, error in self.failures.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                raise error
        stdout = ""
        for prefix, output in self.outputs.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                stdout = output
        return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr="")


@pytest.fixture(autouse=True)
def _isolate_host(monkeypatch: pytest.MonkeyPatch):
    """Keep tests away from signals, root checks and real sleeps."""
    monkeypatch.setattr(setup, "setup_signal_handlers", lambda: None)
    monkeypatch.setattr(setup, "check_root", lambda: True)
    monkeypatch.setattr(setup.time, "sleep", lambda seconds: None)
    yield
    logger = logging.getLogger(setup.LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> RecordingRunner:
    recorder = RecordingRunner()
    monkeypatch.setattr(setup.time, "sleep", recorder.sleep)
    return recorder


@pytest.fixture
def config(tmp_path: Path) -> setup.Config:
    """Config with every written path redirected into tmp_path."""
    return setup.Config(
        LOG_FILE=str(tmp_path / "log" / "setup.log"),
        JAIL_FILE=str(tmp_path / "fail2ban" / "jail.d" / "99-ufw-ssh.local"),
        AUDIT_RULES_FILE=str(tmp_path / "audit" / "rules.d" / "99-sudoers.rules"),
    )


@pytest.fixture
def patched_cli(
    monkeypatch: pytest.MonkeyPatch, config: setup.Config, runner: RecordingRunner
) -> RecordingRunner:
    """Route the CLI's commands to the recording runner and its files to tmp_path."""
    monkeypatch.setattr(setup, "Config", lambda: config)
    monkeypatch.setattr(setup, "run_command", runner)
    return runner
