"""Btrfs root filesystem"""


def format_command(device: str) -> str:
  return f"mkfs.btrfs -f {device}"


def mount_options() -> list[str]:
  return ["compress=zstd", "noatime"]
