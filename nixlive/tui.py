import shutil
import sys
from collections.abc import Iterator
from contextlib import contextmanager

from rich import box
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

console = Console()

STEP_PREFIXES = {
  "Settings": "* ",
  "Partitioning": "# ",
  "Disk Setup": "% ",
  "System Configuration": "@ ",
  "System Installation": "^ ",
  "Cleanup": "~ ",
}

COLORS = {"text": "bold blue", "border": "cyan"}


class TUI:
  def __init__(self, dry_mode: bool = False):
    self.enabled: bool = sys.stdout.isatty()
    self.status_text: str = ""
    self.initialized: bool = False
    self.live: Live | None = None
    self.layout: Layout | None = None
    self.output_lines: list[str] = []
    self.dry_mode: bool = dry_mode
    self.colors = COLORS

  def initialize(self) -> None:
    if not self.enabled or self.initialized:
      return
    self.initialized = True

  def _create_status_panel(self, text: str) -> Panel:
    status = Text(text, style=self.colors["text"])
    title = "nixlive [dry run]" if self.dry_mode else "nixlive"
    return Panel(
      status,
      border_style=self.colors["border"],
      padding=(0, 1),
      expand=False,
      box=box.SQUARE,
      title=title,
      title_align="left",
    )

  def _start_live(self) -> None:
    layout = Layout()
    layout.split_column(
      Layout(name="status", size=3),
      Layout(name="output", ratio=1),
    )

    layout["status"].update(self._create_status_panel(self.status_text))
    layout["output"].update(self._output_text())

    self.layout = layout
    self.live = Live(self.layout, console=console, refresh_per_second=10, screen=False)
    self.live.start()

  def _output_text(self) -> Text:
    # Status panel takes 3 lines, leave some buffer
    terminal_height = shutil.get_terminal_size().lines
    visible_lines = max(1, terminal_height - 4)
    return Text.from_markup("\n".join(self.output_lines[-visible_lines:]))

  def update_status(self, message: str, step_name: str = "") -> None:
    if not self.enabled:
      console.print(f"[{self.colors['text']}]{message}[/]")
      return

    if not self.initialized:
      return

    prefix = STEP_PREFIXES.get(step_name, "")
    self.status_text = f"{prefix}{message}"

    if self.live is None:
      # Live display starts with the first step after settings
      self._start_live()

    elif self.layout:
      self.layout["status"].update(self._create_status_panel(self.status_text))

  def print(self, message: str) -> None:
    """Print message to output area when Live is active, or console when not."""
    if self.live and self.layout:
      self.output_lines.append(message)
      self.layout["output"].update(self._output_text())

    else:
      console.print(message)

  @contextmanager
  def suspended(self) -> Iterator[None]:
    """Hand the terminal back for prompts and interactive programs."""
    if self.live is None:
      yield
      return

    self.live.stop()
    self.live = None
    try:
      yield

    finally:
      if self.initialized:
        self._start_live()

  def cleanup(self) -> None:
    if not (self.enabled and self.initialized):
      return

    if self.live:
      self.live.stop()
      self.live = None

    self.initialized = False
