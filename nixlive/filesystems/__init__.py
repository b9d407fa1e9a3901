"""Root filesystem adapter registry"""

import sys
from importlib import import_module
from typing import cast

from rich.console import Console

from nixlive.filesystems.protocol import FilesystemProtocol
from nixlive.types import Filesystem

console = Console()

__all__ = ["get_filesystem", "get_supported_filesystems", "FilesystemProtocol"]


def get_filesystem(filesystem: Filesystem) -> FilesystemProtocol:
  """
  Load and return the adapter module for the given filesystem.

  Each filesystem module must implement the standard function interface.
  """
  try:
    module = import_module(f"nixlive.filesystems.{filesystem.value}")
    # Double cast needed: ModuleType -> object -> FilesystemProtocol
    module_as_object = cast(object, module)
    return cast(FilesystemProtocol, module_as_object)

  except ModuleNotFoundError:
    console.print(f"\n[prompt.invalid]Unsupported filesystem: {filesystem.value}[/]")
    console.print(f"\n[prompt.invalid]No module found at nixlive/filesystems/{filesystem.value}.py[/]")
    sys.exit(1)


def get_supported_filesystems() -> list[Filesystem]:
  """Return supported filesystems in menu order"""
  return [Filesystem.EXT4, Filesystem.BTRFS]
