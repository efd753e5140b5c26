"""
Exception hierarchy for the injection engine.

Structural mismatches and binding lookups are normally recovered close to
where they are raised. Formatting failures are caught by the utility module
manager. File-system errors are not wrapped and propagate as ``OSError``.
"""


class InjectorError(Exception):
  """Base class for all injection failures."""


class StructuralMismatchError(InjectorError):
  """
  Raised when the script does not have the shape an operation expects.

  For example a ``data`` section that does not return an object literal.
  """


class BindingLookupError(InjectorError):
  """Raised when no local binding for the framework package can be found."""


class InconsistentTreeError(InjectorError):
  """
  Raised when an edit would leave the script unparseable.

  The edit is rejected and the tree keeps its previous source.
  """

  def __init__(self, message: str, source: str = "") -> None:
    super().__init__(message)
    self.source = source


class FormattingError(InjectorError):
  """Raised when the source formatter rejects or corrupts generated text."""
