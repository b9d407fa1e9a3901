from __future__ import annotations
from nixlive.types import ContextConfig, DefaultsConfig, Filesystem, PartitionMode
from nixlive.tui import TUI


class InstallerContext:
  """
  Holds the state and configuration for the installation process.

  This context object is passed between installation steps to keep the
  user's answers, the partition assignment and the runtime state of the
  target disk (mounted, swap active, LUKS open) for the cleanup handler.
  """

  def __init__(self, config: ContextConfig, defaults: DefaultsConfig) -> None:
    self.config: ContextConfig = config
    self.defaults: DefaultsConfig = defaults
    self.ui: TUI | None = None

    # User-provided configuration
    self.user_name: str | None = None
    self.user_pass: str | None = None
    self.editor: str | None = None
    self.partitioning: PartitionMode | None = None
    self.disk: str | None = None
    self.filesystem: Filesystem | None = None
    self.luks_enabled: bool = False
    self.luks_pass: str | None = None

    # Partition assignment, names relative to /dev
    self.part_boot: str | None = None
    self.part_root: str | None = None
    self.part_swap: str | None = None

    # Runtime state
    self.root_device: str | None = None
    self.disk_touched: bool = False
    self.cleaned_up: bool = False

  @property
  def dry(self) -> bool:
    """Access dry run flag from config."""
    return self.config.dry

  @property
  def mountpoint(self) -> str:
    return self.defaults["mountpoint"]

  @property
  def mapper_name(self) -> str:
    return self.defaults["mapper_name"]
