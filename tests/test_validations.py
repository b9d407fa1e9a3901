from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from nixlive.validations import (
  validate_block_device,
  validate_cli_arguments,
  validate_defaults_json,
  validate_flake_dir,
  validate_flake_host,
  validate_password,
  validate_username,
)


@pytest.mark.parametrize("name", ["alice", "_svc", "bob-2", "x_y-z9"])
def test_valid_usernames(name: str) -> None:
  assert validate_username(name)


@pytest.mark.parametrize("name", ["", "Alice", "1bob", "-dash", "with space", "a" * 33, "ünï"])
def test_invalid_usernames(name: str) -> None:
  assert not validate_username(name)


def test_password_only_needs_to_be_non_empty() -> None:
  assert validate_password("x")
  assert validate_password(" ")
  assert not validate_password("")


def test_block_device_checks_dev_entries(block_devices: Callable[..., None]) -> None:
  block_devices("sda", "sda1")

  assert validate_block_device("sda")
  assert validate_block_device("sda1")
  assert not validate_block_device("sdb")
  assert not validate_block_device("")
  assert not validate_block_device("../etc/passwd")


def test_block_device_rejects_regular_files() -> None:
  # /dev/null is a character device
  assert not validate_block_device("null")


@pytest.mark.parametrize("host", ["Default", "laptop", "my-host", "host_2"])
def test_valid_flake_hosts(host: str) -> None:
  assert validate_flake_host(host)


@pytest.mark.parametrize("host", ["", "2fast", "has space", "a.b", "x#y", "a'b"])
def test_invalid_flake_hosts(host: str) -> None:
  assert not validate_flake_host(host)


def test_flake_dir_requires_flake_nix(tmp_path: Path, flake_dir: Path) -> None:
  assert validate_flake_dir(str(flake_dir))
  assert not validate_flake_dir(str(tmp_path / "missing"))


def test_cli_arguments_report_every_problem(tmp_path: Path) -> None:
  errors = validate_cli_arguments(flake_dir=str(tmp_path / "nowhere"), host="not valid")

  assert len(errors) == 2
  assert "No flake.nix found" in errors[0]
  assert "Invalid host" in errors[1]


def test_cli_arguments_accept_a_flake(flake_dir: Path) -> None:
  assert validate_cli_arguments(flake_dir=str(flake_dir), host="Default") == []


def test_cli_arguments_reject_quoted_host(flake_dir: Path) -> None:
  errors = validate_cli_arguments(flake_dir=str(flake_dir), host="my'host")

  assert len(errors) == 1
  assert errors[0].startswith("Invalid host: my'host")


def _defaults(**overrides: Any) -> dict[str, Any]:
  data: dict[str, Any] = {
    "mountpoint": "/mnt",
    "host": "Default",
    "mapper_name": "luks-root",
    "efi_size_mib": 512,
    "swap_size_mib": 2048,
    "editor_line": 52,
    "editors": ["vim", "nano", "vi"],
    "nix_config": "experimental-features = nix-command flakes",
    "hardware_config": "hosts/{host}/hardware-configuration.nix",
  }
  data.update(overrides)
  return data


def test_defaults_json_accepts_complete_data() -> None:
  data = _defaults()
  assert validate_defaults_json(data) is data


def test_defaults_json_must_be_an_object() -> None:
  with pytest.raises(ValueError, match="must be an object"):
    _ = validate_defaults_json(["nope"])


def test_defaults_json_reports_missing_keys() -> None:
  data = _defaults()
  del data["mapper_name"]

  with pytest.raises(KeyError, match="mapper_name"):
    _ = validate_defaults_json(data)


@pytest.mark.parametrize(
  "overrides",
  [
    {"efi_size_mib": 0},
    {"swap_size_mib": "2G"},
    {"editor_line": True},
    {"editors": "vim"},
    {"editors": ["vim", 3]},
    {"hardware_config": "hardware-configuration.nix"},
  ],
)
def test_defaults_json_rejects_bad_values(overrides: dict[str, Any]) -> None:
  with pytest.raises(ValueError):
    _ = validate_defaults_json(_defaults(**overrides))
