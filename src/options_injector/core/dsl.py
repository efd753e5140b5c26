"""
Injection Request Schema.

Pydantic model describing one merge operation. Requests can be built in code
or validated from JSON/YAML produced by an outer transform driver.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator

from options_injector.enums import SectionKind


class InjectionRequest(BaseModel):
  """
  A single merge operation against an options object.

  Exactly one payload is used per kind:

  - ``hook``: `target` (hook name) and `code`.
  - ``data`` / ``components``: `entries`.
  - ``method``: `code` (one method) or `entries` (name -> function source).
  - ``mixin``: `identifier`.
  - ``namespace_import``: no payload.
  """

  kind: SectionKind = Field(..., description="Section the request targets.")
  target: Optional[str] = Field(None, description="Hook name for 'hook' requests.")
  entries: Dict[str, str] = Field(default_factory=dict, description="Key -> value expression source.")
  code: Optional[str] = Field(None, description="Statement or method source.")
  identifier: Optional[str] = Field(None, description="Mixin expression for 'mixin' requests.")

  @model_validator(mode="after")
  def check_payload(self) -> "InjectionRequest":
    """
    Ensures the payload fields match the section kind.

    Raises:
        ValueError: If a required field is missing.
    """
    if self.kind == SectionKind.HOOK:
      if not self.target:
        raise ValueError("'hook' requests need a target hook name")
      if self.code is None:
        raise ValueError("'hook' requests need code")
    elif self.kind in (SectionKind.DATA, SectionKind.COMPONENTS):
      if not self.entries:
        raise ValueError(f"'{self.kind.value}' requests need entries")
    elif self.kind == SectionKind.METHOD:
      if self.code is None and not self.entries:
        raise ValueError("'method' requests need code or entries")
    elif self.kind == SectionKind.MIXIN:
      if not self.identifier:
        raise ValueError("'mixin' requests need an identifier")
    return self
