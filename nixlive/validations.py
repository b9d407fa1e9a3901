"""
Validation functions for nixlive.

This module contains all validation functions used throughout the application
for validating usernames, passwords, block devices, flake locations and the
bundled JSON defaults.
"""

import os
import re
import stat
from pathlib import Path
from typing import Any


# =============================================================================
# Validation Functions
# =============================================================================
# Functions that validate data and return boolean or list of issues


def validate_username(username: str) -> bool:
  max_len = 32

  if not username:
    return False
  if len(username) > max_len:
    return False

  pattern = re.compile(r"^[a-z_][a-z0-9_-]*$")
  return bool(pattern.fullmatch(username))


def validate_password(password: str) -> bool:
  return len(password) > 0


def validate_block_device(name: str) -> bool:
  """Check that /dev/<name> exists and is a block device."""
  if not name or "/" in name:
    return False

  try:
    mode = os.stat(f"/dev/{name}").st_mode

  except OSError:
    return False

  return stat.S_ISBLK(mode)


def validate_flake_host(host: str) -> bool:
  """Validate a nixosConfigurations attribute name."""
  return bool(re.fullmatch(r"[A-Za-z_][A-Za-z0-9_-]*", host))


def validate_flake_dir(flake_dir: str) -> bool:
  return (Path(flake_dir) / "flake.nix").is_file()


def validate_defaults_json(data: Any) -> dict[str, Any]:
  """Validate and return defaults JSON data with proper typing."""
  if not isinstance(data, dict):
    raise ValueError("Defaults JSON must be an object")

  required_keys = {
    "mountpoint",
    "host",
    "mapper_name",
    "efi_size_mib",
    "swap_size_mib",
    "editor_line",
    "editors",
    "nix_config",
    "hardware_config",
  }
  missing_keys = required_keys - data.keys()
  if missing_keys:
    raise KeyError(f"Missing required keys: {sorted(missing_keys)}")

  for key in ("efi_size_mib", "swap_size_mib", "editor_line"):
    if not isinstance(data[key], int) or isinstance(data[key], bool) or data[key] <= 0:
      raise ValueError(f"{key} field must be a positive integer")

  if not isinstance(data["editors"], list) or not all(isinstance(e, str) for e in data["editors"]):
    raise ValueError("editors field must be a list of strings")

  if "{host}" not in str(data["hardware_config"]):
    raise ValueError("hardware_config field must contain a {host} placeholder")

  return data


def validate_cli_arguments(flake_dir: str, host: str) -> list[str]:
  """
  Validate all command line arguments and return list of error messages.

  Returns empty list if all arguments are valid, list of error messages otherwise.
  """
  # Define validators as (condition, error_message) tuples
  validators = [
    (validate_flake_dir(flake_dir), f"No flake.nix found in: {flake_dir}"),
    (validate_flake_host(host), f"Invalid host: {host} (must be a valid flake attribute name)"),
  ]

  return [msg for valid, msg in validators if not valid]
