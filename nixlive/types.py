"""
Type definitions for nixlive.

This module contains all custom type definitions used throughout the application.
"""

from typing import TypedDict
from enum import Enum
from dataclasses import dataclass


class DefaultsConfig(TypedDict):
  """Installer defaults loaded from config.json."""

  mountpoint: str
  host: str
  mapper_name: str
  efi_size_mib: int
  swap_size_mib: int
  editor_line: int
  editors: list[str]
  nix_config: str
  hardware_config: str


class PartitionMode(Enum):
  """How the target disk gets partitioned."""

  AUTO = "auto"
  MANUAL = "manual"


class Filesystem(Enum):
  """Supported root filesystems."""

  EXT4 = "ext4"
  BTRFS = "btrfs"


@dataclass
class ContextConfig:
  """Typed configuration object with all command line arguments."""

  dry: bool
  flake_dir: str
  host: str
