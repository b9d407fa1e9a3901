import re
import shlex
from pathlib import Path
from rich.markup import escape
from nixlive.context import InstallerContext
from nixlive.tui import TUI
from nixlive.utils import capture, cmd, scmd

USERNAME_PATTERN = re.compile(r'username = ".*"')


def substitute_username(text: str, user_name: str) -> str:
  """Point every `username = "..."` assignment at user_name."""
  return USERNAME_PATTERN.sub(lambda _m: f'username = "{user_name}"', text)


def flake_warnings(flake_dir: str) -> list[str]:
  """Problems a dry run can spot before the real installation hits them."""
  issues: list[str] = []
  flake = Path(flake_dir) / "flake.nix"
  if not USERNAME_PATTERN.search(flake.read_text()):
    issues.append(f"{flake} has no username = \"...\" assignment to update")

  if not (Path(flake_dir) / ".git").exists():
    issues.append(f"{flake_dir} is not a git repository - git add will fail")

  return issues


def set_flake_username(flake_dir: str, user_name: str, dry_run: bool, ui: TUI) -> None:
  flake = Path(flake_dir) / "flake.nix"
  if dry_run:
    ui.print(f'[bold green][dim][DRY RUN] Setting username = "{escape(user_name)}" in {escape(str(flake))}[/][/]')
    return

  original = flake.read_text()
  updated = substitute_username(original, user_name)
  if updated == original:
    ui.print(f"[bold yellow]Warning:[/] no username assignment changed in {escape(str(flake))}")
    return

  _ = flake.write_text(updated)


def hardware_config_path(ctx: InstallerContext) -> str:
  relative = ctx.defaults["hardware_config"].format(host=ctx.config.host)
  return str(Path(ctx.config.flake_dir) / relative)


def installed_flake_path(ctx: InstallerContext) -> str:
  return f"{ctx.mountpoint}/etc/nixos"


def generate_hardware_config(ctx: InstallerContext, ui: TUI) -> None:
  capture(
    f"nixos-generate-config --root {ctx.mountpoint} --show-hardware-config",
    hardware_config_path(ctx),
    ctx.dry,
    ui,
  )


def copy_flake(ctx: InstallerContext, ui: TUI) -> None:
  """Stage the flake in git and copy it into the target system."""
  flake_dir = shlex.quote(ctx.config.flake_dir)
  target = installed_flake_path(ctx)

  # Flakes only see files tracked by git
  cmd(f"git -C {flake_dir} add --all", ctx.dry, ui)
  cmd(f"mkdir -p {target}", ctx.dry, ui)
  cmd(f"cp -r {flake_dir}/. {target}", ctx.dry, ui)


def install_system(ctx: InstallerContext, ui: TUI) -> None:
  cmd(f"nixos-install --flake {installed_flake_path(ctx)}#{ctx.config.host} --no-root-passwd", ctx.dry, ui)


def set_user_password(ctx: InstallerContext, ui: TUI) -> None:
  assert ctx.user_name is not None
  assert ctx.user_pass is not None
  scmd(f"nixos-enter --root {ctx.mountpoint} -c chpasswd", f"{ctx.user_name}:{ctx.user_pass}\n", ctx.dry, ui)
