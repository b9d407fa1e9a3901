from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from nixlive.input import BlockDevicePrompt
from nixlive.types import PartitionMode
from nixlive.utils import list_block_devices
from nixlive.validations import validate_block_device

console = Console()


def partition_name(disk: str, number: int) -> str:
  """
  Name of the number-th partition on disk, following the kernel convention.

  Disks whose name ends in a digit (nvme0n1, mmcblk0) get a "p" separator.
  """
  separator = "p" if disk[-1:].isdigit() else ""
  return f"{disk}{separator}{number}"


def auto_layout(disk: str) -> tuple[str, str, str]:
  """Return (boot, swap, root) partition names created by the automatic layout."""
  return partition_name(disk, 1), partition_name(disk, 2), partition_name(disk, 3)


def parted_command(disk: str, efi_size_mib: int, swap_size_mib: int) -> str:
  """Single parted invocation for the EFI / swap / root layout."""
  efi_end = 1 + efi_size_mib
  swap_end = efi_end + swap_size_mib
  return (
    f"parted -s /dev/{disk}"
    " mklabel gpt"
    f" mkpart primary fat32 1MiB {efi_end}MiB"
    " set 1 esp on"
    f" mkpart primary linux-swap {efi_end}MiB {swap_end}MiB"
    f" mkpart primary {swap_end}MiB 100%"
  )


def set_disk(partitioning: PartitionMode) -> str:
  if partitioning is PartitionMode.MANUAL:
    console.print("\n[bold green]Select the disk to launch cfdisk with:[/]")
  else:
    console.print("\n[bold green]Select the disk to install NixOS on:[/]")

  console.print("Available disks:")
  console.print(escape(list_block_devices(disks_only=True)))
  console.print()
  return BlockDevicePrompt.ask("Enter disk name (e.g., sda, nvme0n1)", error="Invalid disk. Please try again.")


def set_manual_partitions() -> tuple[str, str, str | None]:
  """Ask which partitions to use after a manual cfdisk session."""
  console.print("\n[bold green]Partitioning complete. Please specify partition assignments:[/]")
  console.print("Available partitions:")
  console.print(escape(list_block_devices(disks_only=False)))
  console.print()

  part_boot = BlockDevicePrompt.ask(
    "Enter EFI partition (e.g., sda1, nvme0n1p1)",
    error="Invalid partition. Try again.",
  )
  part_root = BlockDevicePrompt.ask(
    "Enter root partition (e.g., sda2, nvme0n1p2)",
    exclude=(part_boot,),
    error="Invalid or same as EFI partition. Try again.",
  )

  console.print("Swap partition is optional. Leave blank to skip.")
  part_swap = Prompt.ask("Enter swap partition (e.g., sda3, nvme0n1p3, or blank)", default="", show_default=False)
  part_swap = part_swap.strip().removeprefix("/dev/")

  if not part_swap:
    return part_boot, part_root, None

  if not validate_block_device(part_swap):
    console.print("\n[prompt.invalid]Invalid swap partition. Skipping swap.[/]")
    return part_boot, part_root, None

  if part_swap in (part_boot, part_root):
    console.print("\n[prompt.invalid]Swap cannot be same as EFI or root. Skipping swap.[/]")
    return part_boot, part_root, None

  return part_boot, part_root, part_swap
