"""
Source Formatters for generated utility modules.

Every backend takes the same `FormatterOptions`. Output is reparsed before it
is returned, so a backend that mangles the code raises `FormattingError`
instead of handing back text that would corrupt the target file.
"""

import subprocess
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence, Type, Union

import jsbeautifier

from options_injector.config import FormatterOptions
from options_injector.core.errors import FormattingError
from options_injector.core.script_tree import ScriptTree
from options_injector.enums import FormatterBackend, ScriptLanguage


class SourceFormatter(ABC):
  """Base class for formatter backends."""

  @abstractmethod
  def _format(self, source: str, options: FormatterOptions) -> str:
    """Backend-specific formatting."""

  def format(self, source: str, options: Optional[FormatterOptions] = None) -> str:
    """
    Formats `source` and verifies the output still parses.

    Args:
        source: Program text.
        options: Style settings; defaults apply when omitted.

    Returns:
        str: Formatted text.

    Raises:
        FormattingError: If the backend fails or produces unparseable output.
    """
    options = options or FormatterOptions()
    formatted = self._format(source, options)
    if ScriptTree(formatted, options.parser).has_error and not ScriptTree(source, options.parser).has_error:
      raise FormattingError(f"{type(self).__name__} produced invalid {options.parser.value}")
    return formatted


class NullFormatter(SourceFormatter):
  """Returns source unchanged."""

  def _format(self, source: str, options: FormatterOptions) -> str:
    return source


class BeautifierFormatter(SourceFormatter):
  """
  In-process formatter backed by `jsbeautifier`.

  Honours indent width and line width; quote style, semicolons and trailing
  commas are left as written.
  """

  def _format(self, source: str, options: FormatterOptions) -> str:
    opts = jsbeautifier.default_options()
    opts.indent_size = options.tab_width
    opts.indent_char = " "
    opts.wrap_line_length = options.print_width
    opts.end_with_newline = True
    opts.max_preserve_newlines = 2
    try:
      return jsbeautifier.beautify(source, opts)
    except Exception as e:
      raise FormattingError(f"jsbeautifier failed: {e}") from e


class PrettierFormatter(SourceFormatter):
  """
  Runs the `prettier` CLI in a subprocess.

  Every `FormatterOptions` field maps to a prettier flag.
  """

  _PARSERS = {ScriptLanguage.JAVASCRIPT: "babel", ScriptLanguage.TYPESCRIPT: "typescript"}

  def __init__(self, command: Sequence[str] = ("npx", "--no-install", "prettier"), timeout: float = 60.0) -> None:
    """
    Args:
        command: Executable and leading arguments used to invoke prettier.
        timeout: Seconds before the subprocess is abandoned.
    """
    self.command = list(command)
    self.timeout = timeout

  def build_args(self, options: FormatterOptions) -> list:
    """Translates options into the prettier command line."""
    args = [
      *self.command,
      "--parser",
      self._PARSERS[options.parser],
      "--tab-width",
      str(options.tab_width),
      "--print-width",
      str(options.print_width),
      "--trailing-comma",
      options.trailing_comma.value,
    ]
    if options.single_quote:
      args.append("--single-quote")
    if not options.semi:
      args.append("--no-semi")
    return args

  def _format(self, source: str, options: FormatterOptions) -> str:
    try:
      proc = subprocess.run(
        self.build_args(options),
        input=source,
        capture_output=True,
        text=True,
        timeout=self.timeout,
      )
    except (OSError, subprocess.TimeoutExpired) as e:
      raise FormattingError(f"Could not run prettier: {e}") from e
    if proc.returncode != 0:
      raise FormattingError(proc.stderr.strip() or f"prettier exited with {proc.returncode}")
    return proc.stdout


_FORMATTERS: Dict[FormatterBackend, Type[SourceFormatter]] = {
  FormatterBackend.JSBEAUTIFIER: BeautifierFormatter,
  FormatterBackend.PRETTIER: PrettierFormatter,
  FormatterBackend.NONE: NullFormatter,
}


def get_formatter(backend: Union[FormatterBackend, str] = FormatterBackend.JSBEAUTIFIER) -> SourceFormatter:
  """
  Instantiates the formatter registered for `backend`.

  Args:
      backend: Backend key ('jsbeautifier', 'prettier' or 'none').

  Returns:
      SourceFormatter: A ready-to-use formatter.
  """
  return _FORMATTERS[FormatterBackend(backend)]()
