"""
Best-effort teardown of the target disk.

Registered as an exit handler once the disk is about to be modified, and
called again as the last installation step. It runs at most once and keeps
going when an individual command fails.
"""

import atexit

from nixlive.context import InstallerContext
from nixlive.utils import try_cmd


def register_cleanup(ctx: InstallerContext) -> None:
  if ctx.disk_touched:
    return

  ctx.disk_touched = True
  atexit.register(_cleanup_at_exit, ctx)


def cleanup_commands(ctx: InstallerContext) -> list[str]:
  commands = [f"umount -R {ctx.mountpoint}"]

  if ctx.part_swap:
    commands.append(f"swapoff /dev/{ctx.part_swap}")

  if ctx.luks_enabled:
    commands.append(f"cryptsetup luksClose {ctx.mapper_name}")

  return commands


def _cleanup_at_exit(ctx: InstallerContext) -> None:
  if ctx.ui is not None:
    ctx.ui.cleanup()
  run_cleanup(ctx)


def run_cleanup(ctx: InstallerContext) -> None:
  if ctx.cleaned_up or not ctx.disk_touched:
    return

  ctx.cleaned_up = True
  assert ctx.ui is not None
  ctx.ui.print("[bold green]Cleaning up...[/]")

  for command in cleanup_commands(ctx):
    _ = try_cmd(command, ctx.dry, ctx.ui)
