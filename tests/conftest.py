import os
import stat
import subprocess
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from pytest import MonkeyPatch
from rich.prompt import PromptBase

from nixlive import cleanup
from nixlive import utils
from nixlive.context import InstallerContext
from nixlive.tui import TUI
from nixlive.types import ContextConfig, DefaultsConfig

LSBLK_OUTPUT = """NAME     SIZE MODEL
loop0    2.1G
sda      100G Virtual Disk
nvme0n1  500G Samsung SSD
"""


class RecordingTUI(TUI):
  """TUI that keeps everything printed to the output area."""

  def __init__(self, dry_mode: bool = False):
    super().__init__(dry_mode=dry_mode)
    self.enabled = False
    self.messages: list[str] = []

  def print(self, message: str) -> None:
    self.messages.append(message)


class CommandRecorder:
  def __init__(self) -> None:
    self.commands: list[str] = []
    self.stdin: dict[str, str] = {}
    self.failing: set[str] = set()
    self.stdout: dict[str, str] = {"lsblk": LSBLK_OUTPUT}

  def _returncode(self, command: str) -> int:
    return 1 if any(command.startswith(prefix) for prefix in self.failing) else 0

  def _stdout(self, command: str) -> str:
    for prefix, output in self.stdout.items():
      if command.startswith(prefix):
        return output
    return ""

  def run(self, args: str | list[str], check: bool = False, **_kwargs: Any) -> subprocess.CompletedProcess[str]:
    command = args if isinstance(args, str) else " ".join(args)
    self.commands.append(command)
    returncode = self._returncode(command)
    if check and returncode != 0:
      raise subprocess.CalledProcessError(returncode, command)
    return subprocess.CompletedProcess(args, returncode, stdout=self._stdout(command), stderr="")

  def popen(self, args: str, **_kwargs: Any) -> "FakeProcess":
    self.commands.append(args)
    return FakeProcess(self, args)


class FakeProcess:
  def __init__(self, recorder: CommandRecorder, command: str) -> None:
    self.recorder = recorder
    self.command = command
    self.returncode = recorder._returncode(command)

  def communicate(self, input: str | None = None) -> tuple[str, str]:
    self.recorder.stdin[self.command] = input or ""
    return "", "boom" if self.returncode else ""


@pytest.fixture(autouse=True)
def exit_handlers(monkeypatch: MonkeyPatch) -> list[Callable[..., Any]]:
  """Keep cleanup handlers away from the real interpreter exit."""
  registered: list[Callable[..., Any]] = []
  monkeypatch.setattr(cleanup.atexit, "register", lambda func, *_args: registered.append(func))
  return registered


@pytest.fixture
def recorder(monkeypatch: MonkeyPatch) -> CommandRecorder:
  rec = CommandRecorder()
  monkeypatch.setattr(utils.subprocess, "run", rec.run)
  monkeypatch.setattr(utils.subprocess, "Popen", rec.popen)
  return rec


@pytest.fixture
def answers(monkeypatch: MonkeyPatch) -> Callable[..., None]:
  """Script the terminal input read by every rich prompt."""

  def _script(*values: str) -> None:
    queue: Iterator[str] = iter(values)

    def get_input(cls, console, prompt, password, stream=None) -> str:
      return next(queue)

    monkeypatch.setattr(PromptBase, "get_input", classmethod(get_input))

  return _script


@pytest.fixture
def block_devices(monkeypatch: MonkeyPatch) -> Callable[..., None]:
  """Pretend the given names exist as block devices under /dev."""

  def _devices(*names: str) -> None:
    real_stat = os.stat
    known = {f"/dev/{name}" for name in names}

    def fake_stat(path: Any, *args: Any, **kwargs: Any) -> os.stat_result:
      if str(path).startswith("/dev/"):
        if str(path) not in known:
          raise FileNotFoundError(path)
        return os.stat_result((stat.S_IFBLK | 0o660, 0, 0, 0, 0, 0, 0, 0, 0, 0))
      return real_stat(path, *args, **kwargs)

    monkeypatch.setattr(os, "stat", fake_stat)

  return _devices


@pytest.fixture
def defaults() -> DefaultsConfig:
  return utils.load_defaults()


@pytest.fixture
def flake_dir(tmp_path: Path) -> Path:
  (tmp_path / "flake.nix").write_text(
    "{\n"
    "  outputs = { self, nixpkgs }: let\n"
    "    settings = {\n"
    '      username = "changeme";\n'
    '      editor = "vim";\n'
    "    };\n"
    "  in {};\n"
    "}\n"
  )
  (tmp_path / ".git").mkdir()
  return tmp_path


@pytest.fixture
def make_ctx(defaults: DefaultsConfig, flake_dir: Path) -> Callable[..., InstallerContext]:
  def _make(dry: bool = False) -> InstallerContext:
    ctx = InstallerContext(ContextConfig(dry=dry, flake_dir=str(flake_dir), host=defaults["host"]), defaults)
    ctx.ui = RecordingTUI(dry_mode=dry)
    return ctx

  return _make
