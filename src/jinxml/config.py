"""Converter configuration.

Options accepted when building a Converter:
- template_path / template_string: exactly one template source
- format_spacing: indent width or literal indent string (enables pretty output)
- suppress_undefined: omit elements whose value is undefined (default True)
- functions / transforms / binary_operators: expression language extensions
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, Field, field_validator, model_validator

from jinxml.engine.extensions import RESERVED_NAMES


class BinaryOperator(BaseModel):
    """A custom infix operator for expressions."""

    precedence: int = Field(description="Binding strength; + and - are 30")
    fn: Callable[[Any, Any], Any] = Field(
        description="Called with the left and right operand values"
    )


class ConverterConfig(BaseModel):
    """Construction options for a Converter."""

    model_config = {"frozen": True}

    template_path: Path | None = Field(
        default=None, description="Path to a YAML template file"
    )
    template_string: str | None = Field(
        default=None, description="Inline YAML template text"
    )
    format_spacing: int | str | None = Field(
        default=None,
        description="Indent width or indent string; absent or zero disables formatting",
    )
    suppress_undefined: bool = Field(
        default=True, description="Omit elements whose value is undefined"
    )
    functions: dict[str, Callable[..., Any]] = Field(
        default_factory=dict, description="Functions callable from expressions"
    )
    transforms: dict[str, Callable[..., Any]] = Field(
        default_factory=dict, description="Pipeline transforms, used as value|name"
    )
    binary_operators: dict[str, BinaryOperator] = Field(
        default_factory=dict, description="Custom infix operators"
    )

    @field_validator("format_spacing")
    @classmethod
    def check_format_spacing(cls, value: int | str | None) -> int | str | None:
        if isinstance(value, int) and value < 0:
            raise ValueError("format_spacing must not be negative")
        return value

    @field_validator("binary_operators")
    @classmethod
    def check_operator_names(
        cls, value: dict[str, BinaryOperator]
    ) -> dict[str, BinaryOperator]:
        for name in value:
            if not name.isidentifier() or name in RESERVED_NAMES:
                raise ValueError(
                    f"Binary operator {name!r} must be an identifier and not a keyword"
                )
        return value

    @model_validator(mode="after")
    def check_template_source(self) -> "ConverterConfig":
        """Exactly one of template_path and template_string must be set."""
        if (self.template_path is None) == (self.template_string is None):
            raise ValueError(
                "Provide exactly one of 'template_path' or 'template_string'"
            )
        return self
