"""ext4 root filesystem"""


def format_command(device: str) -> str:
  return f"mkfs.ext4 -F {device}"


def mount_options() -> list[str]:
  return []
