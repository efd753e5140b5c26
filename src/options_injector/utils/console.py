"""
Logging and Console Utilities.

All output of the injector goes through the standard `logging` library,
rendered by a `rich` handler. The handler is attached to a console proxy so
that embedding tools (and tests) can redirect output into a buffer with
`set_console` without re-importing anything.

Attributes:
    console (_ConsoleProxy): Stable module-level reference to the active console.
    logger (logging.Logger): The package logger used by the helpers below.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

LOGGER_NAME = "options_injector"

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "path": "bold blue",
    "code": "bold magenta",
  }
)

logger = logging.getLogger(LOGGER_NAME)


class _ConsoleProxy:
  """
  Forwards printing to a swappable `rich.console.Console`.

  Swapping the backend also re-attaches the package's `RichHandler`, so
  `logger.info(...)` follows the console to its new destination.

  Attributes:
      _backend (Console): The active Rich Console instance.
  """

  def __init__(self) -> None:
    self._backend: Console = Console(theme=_THEME, stderr=True)
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and updates the logging handler.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self) -> None:
    """Resets the proxy to a fresh stderr console."""
    self._backend = Console(theme=_THEME, stderr=True)
    self._configure_logging()

  @property
  def backend(self) -> Console:
    """The currently active Console."""
    return self._backend

  def _configure_logging(self) -> None:
    # Only the package logger is touched; host applications keep the root logger.
    for handler in list(logger.handlers):
      if isinstance(handler, RichHandler):
        logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._backend,
      show_time=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
    logger.setLevel(logging.INFO)
    logger.addHandler(rich_handler)
    logger.propagate = False

  def print(self, *args: Any, **kwargs: Any) -> None:
    """Forwards `print` calls to the active backend."""
    self._backend.print(*args, **kwargs)

  def export_text(self, **kwargs: Any) -> str:
    """
    Forwards `export_text` (useful for log capturing).

    Args:
        **kwargs: Options passed to console.export_text.

    Returns:
        str: The captured text output.
    """
    return self._backend.export_text(**kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Redirects console output and logging to `new_console`.

  Args:
      new_console (Console): The configured Rich console to use globally.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Resets logging and console to standard error."""
  console.reset()


def get_console() -> Console:
  """
  Retrieves the currently active console backend.

  Returns:
      Console: The active Rich Console.
  """
  return console.backend


def log_info(msg: str) -> None:
  """
  Logs an informational message.

  Args:
      msg (str): The message content. Can include rich markup like [bold].
  """
  logger.info(msg, extra={"markup": True})


def log_success(msg: str) -> None:
  """
  Logs a message at the custom SUCCESS level.

  Args:
      msg (str): The message content.
  """
  logger.log(SUCCESS_LEVEL_NUM, msg, extra={"markup": True})


def log_warning(msg: str) -> None:
  """
  Logs a warning.

  Args:
      msg (str): The message content.
  """
  logger.warning(msg, extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs an error.

  Args:
      msg (str): The message content.
  """
  logger.error(msg, extra={"markup": True})
