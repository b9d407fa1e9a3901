"""
Editor detection and flake customization.

The user gets a chance to adjust the flake's settings block before anything
touches the disk. Editors are probed in a fixed preference order; when none
is installed the customization is skipped.
"""

import shlex
import shutil
from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt

from nixlive.input import IntegerPrompt
from nixlive.tui import TUI
from nixlive.utils import cmd

console = Console()


def check_editors(preference: list[str]) -> str | None:
  """Return the first editor in preference order found on PATH."""
  for editor in preference:
    if shutil.which(editor):
      return editor
  return None


def editor_menu(default_editor: str, line: int) -> list[tuple[str, str | None]]:
  """Build (label, command) entries; a None command means skip editing."""
  return [
    (f"{default_editor} (default)", default_editor),
    ("vim", f"vim +{line}"),
    ("nano", f"nano +{line}"),
    ("vi", f"vi +{line}"),
    ("Skip editing", None),
  ]


def set_editor(preference: list[str], line: int) -> str | None:
  default_editor = check_editors(preference)
  if default_editor is None:
    names = ", ".join(preference)
    console.print(f"\n[prompt.invalid]No editors found ({names}). Falling back to installation without editing flake.nix.[/]")
    return None

  entries = editor_menu(default_editor, line)
  console.print("\n[bold green]Choose an editor to customize flake.nix:[/]")
  for i, (label, _command) in enumerate(entries, start=1):
    console.print(f" {i}. {label}")

  console.print()
  choices = [str(i) for i in range(1, len(entries) + 1)]
  while True:
    choice = IntegerPrompt.ask("Enter choice", choices=choices, default=1)
    editor = entries[choice - 1][1]
    if editor is not None and not shutil.which(shlex.split(editor)[0]):
      console.print(f"\n[prompt.invalid]Editor {editor} not found. Please choose another.[/]")
      continue
    return editor


def edit_flake(editor: str | None, flake_dir: str, dry_run: bool, ui: TUI) -> None:
  if editor is None:
    console.print("\n[bold green]Skipping flake.nix editing as requested or no editor available.[/]")
    return

  flake = Path(flake_dir) / "flake.nix"
  console.print(f"\n[bold green]Opening flake.nix in {editor} for customization...[/]")
  console.print("Edit the 'settings' block to customize username, editor, browser, hostname, etc.")
  console.print("Save and exit when done (e.g., :wq for vim & vi, Ctrl+O then Ctrl+X for nano).")
  _ = Prompt.ask("Press Enter to continue", default="", show_default=False)

  with ui.suspended():
    cmd(f"{editor} {shlex.quote(str(flake))}", dry_run, ui)
