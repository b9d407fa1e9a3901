import subprocess
import os
import sys
import json
from pathlib import Path
from rich.console import Console
from rich.markup import escape
from nixlive.validations import validate_defaults_json
from nixlive.input import IntegerPrompt, UsernamePrompt, PasswordPrompt
from nixlive.types import DefaultsConfig, Filesystem, PartitionMode
from nixlive.tui import TUI

console = Console()


def get_resource_path(relative_path: str) -> str:
  """Get absolute path to a resource shipped inside the nixlive package."""
  return os.path.join(os.path.dirname(os.path.abspath(__file__)), relative_path)


def cmd(command: str, dry_run: bool, ui: TUI) -> None:
  if dry_run:
    ui.print(f"[bold green][dim][DRY RUN] {escape(command)}[/][/]")
    return

  ui.print(f"[dim]$ {escape(command)}[/]")

  try:
    _ = subprocess.run(command, check=True, shell=True)

  except subprocess.CalledProcessError as e:
    console.print(f"\n[bold red]Command '{escape(command)}' failed with error: {e}[/]")
    sys.exit(1)


def scmd(command: str, stdin_data: str, dry_run: bool, ui: TUI) -> None:
  """Execute a command with sensitive stdin data without exposing it in process list."""
  if dry_run:
    ui.print(f"[bold green][dim][DRY RUN] {escape(command)} (with stdin data)[/][/]")
    return

  ui.print(f"[dim]$ {escape(command)} (with stdin data)[/]")

  try:
    process = subprocess.Popen(
      command, shell=True, stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True
    )

    stdout, stderr = process.communicate(input=stdin_data)
    if process.returncode != 0:
      raise subprocess.CalledProcessError(process.returncode, command, output=stdout, stderr=stderr)

  except subprocess.CalledProcessError as e:
    console.print(f"\n[bold red]Command '{escape(command)}' failed with error: {e}[/]")

    if e.stderr:
      console.print(f"\n[bold red]stderr: {escape(e.stderr)}[/]")

    sys.exit(1)


def try_cmd(command: str, dry_run: bool, ui: TUI) -> bool:
  """Run a command whose failure is reported but tolerated."""
  if dry_run:
    ui.print(f"[bold green][dim][DRY RUN] {escape(command)}[/][/]")
    return True

  ui.print(f"[dim]$ {escape(command)}[/]")
  result = subprocess.run(command, check=False, shell=True)
  if result.returncode != 0:
    ui.print(f"[bold yellow]Warning:[/] '{escape(command)}' exited with status {result.returncode}")
    return False

  return True


def capture(command: str, path: str, dry_run: bool, ui: TUI) -> None:
  """Run a command and write its standard output to path."""
  if dry_run:
    ui.print(f"[bold green][dim][DRY RUN] {escape(command)} > {escape(path)}[/][/]")
    return

  ui.print(f"[dim]$ {escape(command)} > {escape(path)}[/]")

  try:
    result = subprocess.run(command, check=True, shell=True, capture_output=True, text=True)

  except subprocess.CalledProcessError as e:
    console.print(f"\n[bold red]Command '{escape(command)}' failed with error: {e}[/]")

    if e.stderr:
      console.print(f"\n[bold red]stderr: {escape(e.stderr)}[/]")

    sys.exit(1)

  target = Path(path)
  target.parent.mkdir(parents=True, exist_ok=True)
  _ = target.write_text(result.stdout)


def load_defaults() -> DefaultsConfig:
  """Load default values from the bundled config.json file."""
  config_file = get_resource_path("config.json")
  try:
    with open(config_file, "r") as f:
      config_data = json.load(f)
      if "defaults" not in config_data:
        raise KeyError("Missing 'defaults' section")

      data = validate_defaults_json(config_data["defaults"])

      return DefaultsConfig(
        mountpoint=str(data["mountpoint"]),
        host=str(data["host"]),
        mapper_name=str(data["mapper_name"]),
        efi_size_mib=int(data["efi_size_mib"]),
        swap_size_mib=int(data["swap_size_mib"]),
        editor_line=int(data["editor_line"]),
        editors=[str(editor) for editor in data["editors"]],
        nix_config=str(data["nix_config"]),
        hardware_config=str(data["hardware_config"]),
      )

  except (FileNotFoundError, json.JSONDecodeError) as e:
    console.print(f"\n[bold red]Error loading config.json: {e}[/]")
    sys.exit(1)

  except (KeyError, ValueError) as e:
    console.print(f"\n[bold red]Invalid config.json format: {e}[/]")
    sys.exit(1)


def set_user() -> tuple[str, str]:
  console.print("\n[bold green]Set up a user account:[/]")
  user_name = UsernamePrompt.ask("Enter username")
  console.print(f"\n[bold green]Set password for {user_name}:[/]")
  user_pass = PasswordPrompt.ask("Enter password")
  return user_name, user_pass


def _choose(title: str, options: list[str]) -> int:
  """Show a numbered menu and return the zero-based index of the chosen option."""
  console.print(f"\n[bold green]{title}[/]")
  for i, option in enumerate(options, start=1):
    console.print(f" {i}. {option}")

  console.print()
  choices = [str(i) for i in range(1, len(options) + 1)]
  return IntegerPrompt.ask("Enter choice", choices=choices) - 1


def set_partitioning() -> PartitionMode:
  options = [
    (PartitionMode.AUTO, "Automatic (for single OS or clean disk)"),
    (PartitionMode.MANUAL, "Manual (for dual-boot or custom layouts, launches cfdisk)"),
  ]
  index = _choose("Choose partitioning method:", [label for _mode, label in options])
  return options[index][0]


def set_filesystem(supported: list[Filesystem]) -> Filesystem:
  index = _choose("Choose a filesystem for root partition:", [fs.value for fs in supported])
  return supported[index]


def set_luks() -> tuple[bool, str | None]:
  index = _choose("Enable LUKS encryption for root partition?", ["Yes", "No"])
  if index != 0:
    return False, None

  console.print("\n[bold green]Set LUKS encryption password:[/]")
  luks_pass = PasswordPrompt.ask("Enter LUKS password", confirm_message="Confirm LUKS password")
  return True, luks_pass


def list_block_devices(disks_only: bool) -> str:
  """Return the lsblk table of disks (or disks and partitions) without loop devices."""
  columns = ["lsblk", "-o", "NAME,SIZE,MODEL"]
  if disks_only:
    columns.insert(1, "-d")

  try:
    result = subprocess.run(columns, capture_output=True, text=True, check=False)

  except FileNotFoundError:
    return "lsblk not available"

  return "\n".join(line for line in result.stdout.splitlines() if "loop" not in line)


def format_step_name(name: str) -> str:
  """
  Format step name from function name string.

  Args:
      name: Step function name

  Returns:
      Formatted step name (e.g., "Disk Setup")
  """
  return name.replace("step_", "").replace("_", " ").title().lstrip("0123456789 ")
