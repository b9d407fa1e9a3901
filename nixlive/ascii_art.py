from rich.console import Console

console = Console()

# ============================================================================
# NixOS snowflake
# ============================================================================
_nixos_logo: str = """[bold blue]
    \\\\  \\\\ //
   ==\\\\__\\\\/ //
     //   \\\\//
  ==//     //==
   //\\\\___//
  // /\\\\  \\\\==
    // \\\\  \\\\[/]"""

# ============================================================================
# NIXLIVE ASCII art
# ============================================================================
_nixlive_text: str = """[bold white]
█▄░█ █ ▀▄▀ █░░ █ █░█ █▀▀
█░▀█ █ █░█ █▄▄ █ ▀▄▀ ██▄[/]"""


def print_logo(dry_mode: bool = False) -> None:
  console.clear()
  tagline = "NixOS flake installer, dry run." if dry_mode else "NixOS flake installer, simplified."
  console.print(f"{_nixos_logo}\n{_nixlive_text}\n[cyan]{tagline}[/]")
