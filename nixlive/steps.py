import sys
from typing import Callable
from rich.console import Console
from rich.prompt import Confirm
from nixlive.cleanup import register_cleanup, run_cleanup
from nixlive.context import InstallerContext
from nixlive.disks import auto_layout, parted_command, set_disk, set_manual_partitions
from nixlive.editors import edit_flake, set_editor
from nixlive.filesystems import get_filesystem, get_supported_filesystems
from nixlive.flake import (
  copy_flake,
  flake_warnings,
  generate_hardware_config,
  install_system,
  set_flake_username,
  set_user_password,
)
from nixlive.types import PartitionMode
from nixlive.utils import (
  cmd,
  scmd,
  set_user,
  set_luks,
  set_filesystem,
  set_partitioning,
)

console = Console()


def step_0_settings(ctx: InstallerContext, _warnings: list[str]) -> None:
  assert ctx.ui is not None
  config_items = [
    ("Flake", ctx.config.flake_dir),
    ("Host", ctx.config.host),
    ("Mount point", ctx.mountpoint),
  ]

  ctx.ui.initialize()

  if ctx.dry:
    console.print("Skipping live environment and root checks in dry run mode")
    console.print()

  for label, value in config_items:
    console.print(f" • {label}: {value}")

  console.print("\n[bold green]Let's configure your NixOS installation.[/]")
  ctx.user_name, ctx.user_pass = set_user()

  ctx.editor = set_editor(ctx.defaults["editors"], ctx.defaults["editor_line"])
  edit_flake(ctx.editor, ctx.config.flake_dir, ctx.dry, ctx.ui)

  ctx.partitioning = set_partitioning()
  ctx.filesystem = set_filesystem(get_supported_filesystems())
  ctx.luks_enabled, ctx.luks_pass = set_luks()
  ctx.disk = set_disk(ctx.partitioning)

  summary = [
    ("Username", ctx.user_name),
    ("User Password", "[hidden]"),
    ("Partitioning", ctx.partitioning.value),
    ("Disk", f"/dev/{ctx.disk}"),
    ("Filesystem", ctx.filesystem.value),
    ("LUKS encryption", "yes" if ctx.luks_enabled else "no"),
  ]

  console.print("\n[bold green]Summary:[/]")
  for label, value in summary:
    console.print(f" • {label}: {value}", markup=False)
  console.print()

  if ctx.partitioning is PartitionMode.MANUAL:
    response = Confirm.ask("Proceed to manual partitioning?", default=False)
  else:
    console.print(f"[bold yellow]WARNING:[/] All data on /dev/{ctx.disk} will be erased.", style="bold")
    response = Confirm.ask("Proceed with installation?", default=False)

  if not response:
    console.print("\n[prompt.invalid]Installation aborted.[/]")
    sys.exit(1)

  console.print()


def step_1_partitioning(ctx: InstallerContext, _warnings: list[str]) -> None:
  assert ctx.ui is not None
  assert ctx.disk is not None
  register_cleanup(ctx)

  if ctx.partitioning is PartitionMode.AUTO:
    ctx.ui.print("Creating automatic partition layout...")
    cmd(f"wipefs -a /dev/{ctx.disk}", ctx.dry, ctx.ui)
    cmd(parted_command(ctx.disk, ctx.defaults["efi_size_mib"], ctx.defaults["swap_size_mib"]), ctx.dry, ctx.ui)
    cmd(f"partprobe /dev/{ctx.disk}", ctx.dry, ctx.ui)
    ctx.part_boot, ctx.part_swap, ctx.part_root = auto_layout(ctx.disk)
    return

  with ctx.ui.suspended():
    console.print("\nLaunching cfdisk for manual partitioning...")
    console.print("Please create partitions, including EFI, root, and optionally a swap. Save and quit when done.")
    cmd(f"cfdisk /dev/{ctx.disk}", ctx.dry, ctx.ui)
    ctx.part_boot, ctx.part_root, ctx.part_swap = set_manual_partitions()


def step_2_disk_setup(ctx: InstallerContext, _warnings: list[str]) -> None:
  assert ctx.ui is not None
  assert ctx.part_boot is not None
  assert ctx.part_root is not None
  assert ctx.filesystem is not None

  if ctx.luks_enabled:
    assert ctx.luks_pass is not None
    ctx.ui.print("Setting up LUKS encryption...")
    scmd(f"cryptsetup luksFormat --batch-mode /dev/{ctx.part_root} -", ctx.luks_pass, ctx.dry, ctx.ui)
    scmd(f"cryptsetup luksOpen /dev/{ctx.part_root} {ctx.mapper_name} -", ctx.luks_pass, ctx.dry, ctx.ui)
    ctx.root_device = f"/dev/mapper/{ctx.mapper_name}"
  else:
    ctx.root_device = f"/dev/{ctx.part_root}"

  filesystem = get_filesystem(ctx.filesystem)

  ctx.ui.print("Formatting partitions...")
  cmd(f"mkfs.fat -F32 /dev/{ctx.part_boot}", ctx.dry, ctx.ui)
  cmd(filesystem.format_command(ctx.root_device), ctx.dry, ctx.ui)
  if ctx.part_swap:
    cmd(f"mkswap /dev/{ctx.part_swap}", ctx.dry, ctx.ui)

  ctx.ui.print("Mounting filesystems...")
  options = filesystem.mount_options()
  mount_opts = f"-o {','.join(options)} " if options else ""
  cmd(f"mount {mount_opts}{ctx.root_device} {ctx.mountpoint}", ctx.dry, ctx.ui)
  cmd(f"mkdir -p {ctx.mountpoint}/boot", ctx.dry, ctx.ui)
  cmd(f"mount /dev/{ctx.part_boot} {ctx.mountpoint}/boot", ctx.dry, ctx.ui)
  if ctx.part_swap:
    cmd(f"swapon /dev/{ctx.part_swap}", ctx.dry, ctx.ui)


def step_3_system_configuration(ctx: InstallerContext, warnings: list[str]) -> None:
  assert ctx.ui is not None
  assert ctx.user_name is not None

  if ctx.dry:
    warnings.extend(flake_warnings(ctx.config.flake_dir))

  ctx.ui.print("Generating hardware configuration...")
  generate_hardware_config(ctx, ctx.ui)
  set_flake_username(ctx.config.flake_dir, ctx.user_name, ctx.dry, ctx.ui)

  ctx.ui.print("Copying flake to /etc/nixos...")
  copy_flake(ctx, ctx.ui)


def step_4_system_installation(ctx: InstallerContext, _warnings: list[str]) -> None:
  assert ctx.ui is not None
  ctx.ui.print("Installing system...")
  install_system(ctx, ctx.ui)
  set_user_password(ctx, ctx.ui)


def step_5_cleanup(ctx: InstallerContext, _warnings: list[str]) -> None:
  run_cleanup(ctx)


def get_install_steps(_ctx: InstallerContext) -> list[Callable[[InstallerContext, list[str]], None]]:
  """Get installation steps in execution order."""
  return [
    step_0_settings,
    step_1_partitioning,
    step_2_disk_setup,
    step_3_system_configuration,
    step_4_system_installation,
    step_5_cleanup,
  ]
