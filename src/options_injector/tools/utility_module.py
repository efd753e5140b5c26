"""
Utility Module Manager.

Maintains shared helper files (``<output root>/utils/gogocodeTransfer.js`` by
default) that transformed components import generated functions from.

Files are only ever extended: the current content is read, the new function
is appended when no structurally equivalent definition exists, and the
formatted result replaces the file as a whole. Updates to the same file are
serialised with a per-path lock.
"""

import os
import threading
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from rich.markup import escape

from options_injector.config import DEFAULT_UTILITY_FILE_NAME, FormatterOptions, InjectorConfig
from options_injector.core.errors import FormattingError
from options_injector.core.script_tree import ScriptTree, parse_script
from options_injector.enums import ScriptLanguage
from options_injector.tools.formatter import SourceFormatter, get_formatter
from options_injector.utils.console import log_error, log_info, log_success

ParseFn = Callable[[str], ScriptTree]
PathLike = Union[str, os.PathLike]

_TS_SUFFIXES = (".ts", ".tsx", ".mts", ".cts")

# One lock per helper file, kept for the life of the process.
_PATH_LOCKS: Dict[Path, threading.Lock] = {}
_REGISTRY_LOCK = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
  with _REGISTRY_LOCK:
    return _PATH_LOCKS.setdefault(path, threading.Lock())


def _parser_for(path: Path) -> ParseFn:
  language = ScriptLanguage.TYPESCRIPT if path.suffix in _TS_SUFFIXES else ScriptLanguage.JAVASCRIPT
  return lambda source: parse_script(source, language)


class UtilityFileRecord:
  """
  One shared helper module on disk.

  Attributes:
      path: Absolute location of the file.
      content: Text as last read or written.
  """

  def __init__(self, path: Path, content: str = "") -> None:
    self.path = path
    self.content = content

  @classmethod
  def load(cls, path: Path) -> "UtilityFileRecord":
    """
    Reads `path`, treating a missing file as empty.

    Args:
        path: File location.

    Returns:
        UtilityFileRecord: The record.
    """
    content = path.read_text(encoding="utf-8") if path.exists() else ""
    return cls(path, content)

  def write(self, content: str) -> None:
    """Replaces the whole file with `content`."""
    self.path.write_text(content, encoding="utf-8")
    self.content = content


class UtilityModuleManager:
  """
  Adds generated functions to shared helper modules.
  """

  def __init__(
    self,
    formatter: Optional[SourceFormatter] = None,
    options: Optional[FormatterOptions] = None,
    default_file_name: str = DEFAULT_UTILITY_FILE_NAME,
    parse_fn: Optional[ParseFn] = None,
  ) -> None:
    """
    Initializes the manager.

    Args:
        formatter: Backend used before writing; jsbeautifier when omitted.
        options: Formatting style.
        default_file_name: File used when a call gives no explicit name.
        parse_fn: Parser for file content; chosen by file extension when omitted.
    """
    self.formatter = formatter or get_formatter()
    self.options = options or FormatterOptions()
    self.default_file_name = default_file_name
    self.parse_fn = parse_fn

  @classmethod
  def from_config(cls, config: InjectorConfig) -> "UtilityModuleManager":
    """
    Builds a manager from the formatter and file settings of `config`.

    Args:
        config: Loaded injector configuration.

    Returns:
        UtilityModuleManager: The configured manager.
    """
    return cls(
      formatter=get_formatter(config.formatter),
      options=config.formatter_options,
      default_file_name=config.utility_file_name,
    )

  def resolve_path(self, output_root_path: PathLike, file_name: Optional[str] = None) -> Path:
    """
    Computes ``<dir of output root>/utils/<file name>``.

    The output root counts as a file (and its parent directory is used) when
    it is not an existing directory and its last component contains a dot.

    Args:
        output_root_path: Output directory or a file inside it.
        file_name: Helper file name; the default file when omitted.

    Returns:
        Path: Absolute path of the helper file.
    """
    root = Path(output_root_path).resolve()
    root_dir = root.parent if not root.is_dir() and "." in root.name else root
    return root_dir / "utils" / (file_name or self.default_file_name)

  def import_specifier(self, consumer_file_path: PathLike, utility_path: Path) -> str:
    """
    Module specifier a consumer file must import `utility_path` with.

    Args:
        consumer_file_path: The file that will contain the import.
        utility_path: Absolute helper file path.

    Returns:
        str: Relative, extension-less, forward-slash specifier. The
        ``gogocodeTransfer.js`` helper always maps to ``./gogocodeTransfer``;
        configured names get their path relative to the consumer.
    """
    if utility_path.name == DEFAULT_UTILITY_FILE_NAME:
      return f"./{Path(DEFAULT_UTILITY_FILE_NAME).stem}"

    consumer_dir = Path(consumer_file_path).resolve().parent
    relative = os.path.relpath(utility_path, consumer_dir)
    specifier = os.path.splitext(relative)[0].replace(os.sep, "/").replace("\\", "/")
    if not specifier.startswith("."):
      specifier = f"./{specifier}"
    return specifier

  def ensure_function(
    self,
    function_source: str,
    output_root_path: PathLike,
    consumer_file_path: PathLike,
    file_name: Optional[str] = None,
  ) -> str:
    """
    Makes sure the helper file defines `function_source`.

    Missing parent directories are created. The file is rewritten only when
    the function was added; if formatting fails the error is logged and the
    file is left as it was.

    Args:
        function_source: Complete function definition.
        output_root_path: Output directory or a file inside it.
        consumer_file_path: File that will import the helper.
        file_name: Helper file name; the default file when omitted.

    Returns:
        str: Import specifier for `consumer_file_path`.

    Raises:
        OSError: On file-system failures.
    """
    target = self.resolve_path(output_root_path, file_name)

    with _lock_for(target):
      target.parent.mkdir(parents=True, exist_ok=True)
      record = UtilityFileRecord.load(target)
      parse = self.parse_fn or _parser_for(target)
      tree = parse(record.content)

      if tree.has(function_source):
        log_info(f"Helper already present in [path]{escape(str(target))}[/path]")
      else:
        tree.append(function_source)
        try:
          formatted = self.formatter.format(tree.generate(), self.options)
        except FormattingError as e:
          log_error(f"Skipping write of {escape(str(target))}: {escape(str(e))}")
        else:
          record.write(formatted)
          log_success(f"Updated [path]{escape(str(target))}[/path]")

    return self.import_specifier(consumer_file_path, target)


def ensure_utility_function(
  parse_fn: Optional[ParseFn],
  function_source: str,
  output_root_path: PathLike,
  consumer_file_path: PathLike,
  file_name: Optional[str] = None,
  formatter: Optional[SourceFormatter] = None,
  options: Optional[FormatterOptions] = None,
) -> str:
  """
  Functional shortcut for `UtilityModuleManager.ensure_function`.

  Args:
      parse_fn: Parser for the helper file content (None picks by extension).
      function_source: Complete function definition.
      output_root_path: Output directory or a file inside it.
      consumer_file_path: File that will import the helper.
      file_name: Helper file name; ``gogocodeTransfer.js`` when omitted.
      formatter: Formatter backend.
      options: Formatting style.

  Returns:
      str: Import specifier for `consumer_file_path`.
  """
  manager = UtilityModuleManager(formatter=formatter, options=options, parse_fn=parse_fn)
  return manager.ensure_function(function_source, output_root_path, consumer_file_path, file_name)
