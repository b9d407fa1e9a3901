from typing import Protocol


class FilesystemProtocol(Protocol):
  """Functions every module under nixlive.filesystems provides."""

  def format_command(self, device: str) -> str: ...

  def mount_options(self) -> list[str]: ...
