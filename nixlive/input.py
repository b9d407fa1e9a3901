from rich.console import Console
from rich.prompt import Prompt, PromptBase
from nixlive.validations import (
  validate_block_device,
  validate_username,
  validate_password,
)

console = Console()


class IntegerPrompt(PromptBase[int]):
  response_type = int
  validate_error_message = "\n[prompt.invalid]Please enter a valid integer number"
  illegal_choice_message = "\n[prompt.invalid.choice]Please select one of the available options"


class UsernamePrompt:
  @classmethod
  def ask(cls, message: str) -> str:
    while True:
      user_name = Prompt.ask(message)
      if not validate_username(user_name):
        console.print("\n[prompt.invalid]Invalid username - use lowercase letters, numbers, underscores, or hyphens.[/]")
        continue
      return user_name


class PasswordPrompt:
  @classmethod
  def ask(cls, message: str, confirm_message: str = "Confirm password") -> str:
    while True:
      user_pass = Prompt.ask(message, password=True)
      user_pass_check = Prompt.ask(confirm_message, password=True)
      if user_pass != user_pass_check:
        console.print("\n[prompt.invalid]Passwords do not match. Try again.[/]")
        continue

      if not validate_password(user_pass):
        console.print("\n[prompt.invalid]Password cannot be empty. Try again.[/]")
        continue

      return user_pass


class BlockDevicePrompt:
  """Ask for a device name under /dev until it names an existing block device."""

  @classmethod
  def ask(cls, message: str, exclude: tuple[str, ...] = (), error: str = "Invalid device. Please try again.") -> str:
    while True:
      name = Prompt.ask(message).strip().removeprefix("/dev/")
      if not validate_block_device(name) or name in exclude:
        console.print(f"\n[prompt.invalid]{error}[/]")
        continue
      return name
