"""
Runtime Configuration Store.

Holds the settings shared by the merge operations, the namespace import
helpers and the utility module manager. Values can be declared in a
``[tool.options_injector]`` table of the nearest ``pyproject.toml`` and
overridden by keyword arguments.
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from options_injector.enums import FormatterBackend, ScriptLanguage, TrailingComma
from options_injector.utils.console import log_warning

DEFAULT_FRAMEWORK_PACKAGE = "vue"
DEFAULT_NAMESPACE_NAME = "Vue"
DEFAULT_UTILITY_FILE_NAME = "gogocodeTransfer.js"


class FormatterOptions(BaseModel):
  """
  Style applied to generated utility modules.

  Field names follow the formatter option names they are passed through to.
  """

  tab_width: int = Field(2, ge=1, description="Indent width in spaces.")
  single_quote: bool = Field(True, description="Prefer single quotes for strings.")
  semi: bool = Field(False, description="Terminate statements with semicolons.")
  trailing_comma: TrailingComma = Field(TrailingComma.ES5, description="Trailing comma policy.")
  print_width: int = Field(80, gt=0, description="Maximum line width.")
  parser: ScriptLanguage = Field(ScriptLanguage.TYPESCRIPT, description="Language mode of the formatted text.")


class InjectorConfig(BaseModel):
  """
  Global configuration container for the injector.
  """

  framework_package: str = Field(DEFAULT_FRAMEWORK_PACKAGE, description="Module specifier of the framework.")
  namespace_name: str = Field(DEFAULT_NAMESPACE_NAME, description="Fallback local name of the namespace import.")
  language: ScriptLanguage = Field(ScriptLanguage.JAVASCRIPT, description="Grammar used to parse scripts.")
  utility_file_name: str = Field(DEFAULT_UTILITY_FILE_NAME, description="Default shared helper file name.")
  formatter: FormatterBackend = Field(FormatterBackend.JSBEAUTIFIER, description="Formatter backend.")
  formatter_options: FormatterOptions = Field(default_factory=FormatterOptions)

  @field_validator("namespace_name")
  @classmethod
  def validate_namespace_name(cls, v: str) -> str:
    """
    Ensures the fallback binding is a usable identifier.

    Args:
        v (str): The configured name.

    Returns:
        str: The stripped name.

    Raises:
        ValueError: If the name is not a valid identifier.
    """
    v_clean = v.strip()
    if not v_clean.replace("$", "_").isidentifier():
      raise ValueError(f"Invalid namespace binding name: '{v}'")
    return v_clean

  @field_validator("utility_file_name")
  @classmethod
  def validate_utility_file_name(cls, v: str) -> str:
    """Rejects names that would escape the ``utils`` directory."""
    if not v or "/" in v or "\\" in v or v in (".", ".."):
      raise ValueError(f"Utility file name must be a plain file name, got '{v}'")
    return v

  @classmethod
  def load(cls, search_path: Optional[Path] = None, **overrides: Any) -> "InjectorConfig":
    """
    Loads configuration from pyproject.toml and applies keyword overrides.

    Overrides set to ``None`` are ignored so callers can forward optional
    arguments directly.

    Args:
        search_path (Optional[Path]): Directory to start searching for TOML config.
        **overrides: Field values that win over the TOML table.

    Returns:
        InjectorConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    merged: Dict[str, Any] = dict(toml_config)
    toml_fmt = toml_config.get("formatter_options", {})
    cli_fmt = overrides.pop("formatter_options", None) or {}
    if isinstance(cli_fmt, FormatterOptions):
      cli_fmt = cli_fmt.model_dump()
    merged["formatter_options"] = {**toml_fmt, **cli_fmt}

    for key, value in overrides.items():
      if value is not None:
        merged[key] = value

    return cls.model_validate(merged)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches ``start_path`` and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except tomllib.TOMLDecodeError as e:
        log_warning(f"Ignoring unreadable {toml_path}: {e}")
        return {}, None
      return data.get("tool", {}).get("options_injector", {}), parent

  return {}, None
