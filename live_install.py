#!/usr/bin/env python3

import argparse
import os
import subprocess
import sys
from argparse import Namespace
from textwrap import dedent
from typing import override

from rich.console import Console

from nixlive.ascii_art import print_logo
from nixlive.context import InstallerContext
from nixlive.steps import get_install_steps
from nixlive.tui import TUI
from nixlive.types import ContextConfig, DefaultsConfig
from nixlive.utils import format_step_name, load_defaults
from nixlive.validations import validate_cli_arguments

__version__ = "0.1.0"

console = Console()


class IndentedHelpFormatter(argparse.RawDescriptionHelpFormatter):
  def __init__(self, prog: str, **kwargs) -> None:
    super().__init__(prog, max_help_position=30, width=80, **kwargs)

  @override
  def _format_action_invocation(self, action: argparse.Action) -> str:
    options = action.option_strings
    if not options:
      return super()._format_action_invocation(action)

    parts: list[str] = []
    if len(options) == 1:
      parts.append(f"{'':4}{options[0]}")

    else:
      parts.append(f"{', '.join(options)}")

    if action.nargs != 0:
      default_metavar = self._get_default_metavar_for_optional(action)
      parts[-1] += f" {self._format_args(action, default_metavar)}"

    return parts[-1]


def _is_live_environment() -> bool:
  """The NixOS live ISO has /iso and a tmpfs root."""
  if not os.path.isdir("/iso"):
    return False

  try:
    result = subprocess.run(["findmnt", "-o", "FSTYPE", "-n", "/"], capture_output=True, text=True, check=False)

  except FileNotFoundError:
    return False

  return result.stdout.strip() == "tmpfs"


def _check_system_requirements() -> None:
  """Check if the system meets installation requirements."""
  if not _is_live_environment():
    console.print("\n[prompt.invalid]Error: This script must be run in the NixOS live ISO environment.[/]")
    console.print("Please boot the NixOS live ISO and try again.")
    sys.exit(1)

  if os.geteuid() != 0:
    console.print(f"\n[prompt.invalid]This script must be run as root. Try sudo {sys.argv[0]}[/]")
    sys.exit(1)


def _create_argument_parser(defaults: DefaultsConfig) -> argparse.ArgumentParser:
  """Create and configure the argument parser."""
  parser = argparse.ArgumentParser(
    formatter_class=IndentedHelpFormatter,
    description=dedent("""
      Interactive NixOS installer for a custom flake.

      Run it as root from the NixOS live ISO, inside the flake's
      directory. It asks for a user account, lets you customize
      flake.nix, partitions and formats the target disk (optionally
      with LUKS encryption) and hands over to nixos-install.
    """),
    epilog=dedent("""
      Examples:
        %(prog)s                          # Install the flake in the current directory
        %(prog)s --dry                    # Preview installation steps
        %(prog)s --flake ~/dotfiles       # Install a flake from another directory
        %(prog)s --host laptop            # Install nixosConfigurations.laptop
    """),
  )

  _ = parser.add_argument(
    "-d",
    "--dry",
    action="store_true",
    help="preview installation steps without executing commands or writing files",
    dest="dry",
  )

  _ = parser.add_argument(
    "-f",
    "--flake",
    metavar="DIR",
    type=str,
    default=".",
    help="directory containing flake.nix [default: %(default)s]",
    dest="flake_dir",
  )

  _ = parser.add_argument(
    "--host",
    metavar="NAME",
    type=str,
    default=defaults["host"],
    help="nixosConfigurations entry to install [default: %(default)s]",
    dest="host",
  )

  _ = parser.add_argument("--version", action="version", version=f"nixlive {__version__}")

  return parser


def _create_context_config(args: Namespace) -> ContextConfig:
  """Create a typed ContextConfig from an argparse Namespace."""
  return ContextConfig(
    dry=bool(getattr(args, "dry", False)),
    flake_dir=str(getattr(args, "flake_dir", ".")),
    host=str(getattr(args, "host", "Default")),
  )


def _run_installation(ctx: InstallerContext, ui: TUI, warnings: list[str]) -> None:
  """Run the installation process with proper error handling."""
  steps = get_install_steps(ctx)
  total_steps = len(steps) - 1  # Exclude step 0 from count

  for i, step in enumerate(steps):
    step_name = format_step_name(step.__name__)

    # Status line (exclude step 0 from status bar display)
    if i > 0:
      filled = "▓" * i
      empty = "░" * (total_steps - i)
      progress_bar = f"[{filled}{empty}]"
      ui.update_status(f"{progress_bar} {step_name} · Step {i}/{total_steps}", step_name)

    try:
      step(ctx, warnings)

    except KeyboardInterrupt:
      ui.cleanup()
      console.print("\n\n[prompt.invalid]Installation interrupted by user. Exiting...[/]")
      sys.exit(130)

    except Exception as e:
      ui.cleanup()
      console.print(f"\n[prompt.invalid]Step '{step_name}' failed with error: {e}[/]")
      console.print("\n[prompt.invalid]Installation cannot continue.[/]")
      if ctx.dry:
        console.print("\n[prompt.invalid]This error occurred during dry run - actual installation might fail.[/]")
      sys.exit(1)

  # Clear status line when installation completes
  ui.cleanup()


def _install() -> None:
  """Collect settings and run every installation step."""
  warnings: list[str] = []
  defaults = load_defaults()
  parser = _create_argument_parser(defaults)
  config = _create_context_config(parser.parse_args())

  errors = validate_cli_arguments(flake_dir=config.flake_dir, host=config.host)

  if errors:
    console.print("\n[prompt.invalid]Invalid arguments provided:[/]")
    console.print("\n".join(f" • {err}" for err in errors))
    console.print("\n[yellow]Use --help for valid options[/]")
    sys.exit(1)

  if not config.dry:
    _check_system_requirements()

  os.environ["NIX_CONFIG"] = defaults["nix_config"]

  ctx = InstallerContext(config, defaults)
  ctx.ui = TUI(dry_mode=config.dry)

  print_logo(config.dry)
  console.print("\n[bold green]Welcome to the NixOS flake installer![/]")
  if config.dry:
    console.print("[bold yellow]DRY RUN MODE[/] - No actual changes will be made to your system")
  console.print()

  _run_installation(ctx, ctx.ui, warnings)

  if config.dry:
    console.print("\n")

    if warnings:
      console.print("[bold yellow]Warnings encountered during dry run:[/]")
      for warning in warnings:
        console.print(f" • {warning}")
      console.print()

    console.print("[bold green]Dry run completed successfully![/]")
    console.print("[bold green]Run without --dry flag to perform actual installation.[/]")
    console.print()

  else:
    console.print("\n")
    console.print("[bold green]Installation complete! Reboot to start your new NixOS system.[/]")
    console.print()


def main() -> None:
  """Main entry point for the installer."""
  try:
    _install()

  except KeyboardInterrupt:
    console.print("\n[prompt.invalid]Installation interrupted. Exiting...[/]")
    sys.exit(130)

  except Exception as e:
    console.print(f"\n[prompt.invalid]Fatal error: {e}[/]")
    sys.exit(1)


if __name__ == "__main__":
  main()
