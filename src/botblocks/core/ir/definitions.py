"""
Block definition types for botblocks IR.

A ``BlockDefinition`` is the static template behind every block instance of
one type: display metadata, category, allowed workspaces, default payload
and the configuration options an editor renders as a form.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .blocks import KIND_KEYS, Category, WorkspaceContext, kind_of
from .results import ValidationReport


class ConfigValueType(StrEnum):
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"
    TEXTAREA = "textarea"


class ConfigValidation(BaseModel):
    """Value constraint attached to a config option."""

    pattern: str | None = None
    min: float | None = None
    max: float | None = None
    message: str | None = None

    model_config = ConfigDict(frozen=True)


_MISSING = object()


def read_path(data: dict[str, Any], path: str) -> Any:
    """Read a dotted path (``properties.size``) from a payload, or ``_MISSING``."""
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


class ConfigOption(BaseModel):
    """
    One editable field of a block payload.

    Attributes:
        key: Dotted path into the payload
        label: Form label
        value_type: Widget / value type
        default: Default value
        options: Allowed values for select options
        required: Whether a value must be present
        validation: Optional pattern / range constraint
        show_when: Visibility predicate (payload equality on each key)
    """

    key: str
    label: str
    value_type: ConfigValueType = ConfigValueType.TEXT
    default: Any = None
    options: list[Any] = Field(default_factory=list)
    required: bool = False
    validation: ConfigValidation | None = None
    show_when: dict[str, Any] | None = None
    description: str | None = None

    model_config = ConfigDict(frozen=True)

    def is_visible(self, data: dict[str, Any]) -> bool:
        if not self.show_when:
            return True
        return all(read_path(data, field) == expected for field, expected in self.show_when.items())

    def check(self, data: dict[str, Any]) -> list[str]:
        """Return error messages for this option's value in ``data``."""
        value = read_path(data, self.key)
        if value is _MISSING or value is None or value == "":
            return [f"'{self.label}' is required"] if self.required else []

        errors: list[str] = []
        if self.value_type == ConfigValueType.SELECT and self.options and value not in self.options:
            errors.append(f"'{self.label}' must be one of: {', '.join(str(o) for o in self.options)}")

        if self.value_type == ConfigValueType.NUMBER and not isinstance(value, int | float):
            errors.append(f"'{self.label}' must be a number")
            return errors

        rule = self.validation
        if rule is None:
            return errors
        if isinstance(value, str):
            if rule.pattern and not re.match(rule.pattern, value):
                errors.append(rule.message or f"'{self.label}' has an invalid format")
            # min/max bound the length of text values
            if rule.min is not None and len(value) < rule.min:
                errors.append(rule.message or f"'{self.label}' must be at least {rule.min:g} characters")
            if rule.max is not None and len(value) > rule.max:
                errors.append(rule.message or f"'{self.label}' must be at most {rule.max:g} characters")
        elif isinstance(value, int | float) and not isinstance(value, bool):
            if rule.min is not None and value < rule.min:
                errors.append(rule.message or f"'{self.label}' must be >= {rule.min:g}")
            if rule.max is not None and value > rule.max:
                errors.append(rule.message or f"'{self.label}' must be <= {rule.max:g}")
        return errors


class BlockDefinition(BaseModel):
    """
    Static, registry-owned template for one block type.

    ``block_type`` is the family string shared by every kind of the family;
    ``default_data`` carries the family discriminator that selects the kind.
    """

    id: str
    block_type: str
    category: Category
    display_name: str
    description: str = ""
    compatibility: list[WorkspaceContext]
    default_data: dict[str, Any] = Field(default_factory=dict)
    config_options: list[ConfigOption] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    usage_hints: list[str] = Field(default_factory=list)
    version: str = "1.0.0"
    experimental: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> str | None:
        return kind_of(self.category, self.default_data)

    @property
    def discriminator(self) -> str | None:
        keys = KIND_KEYS.get(self.category, ())
        return keys[0] if keys else None

    def supports(self, context: WorkspaceContext) -> bool:
        return context in self.compatibility

    def validate_data(self, data: dict[str, Any]) -> ValidationReport:
        """Check a payload against the visible config options."""
        report = ValidationReport()
        for option in self.config_options:
            if not option.is_visible(data):
                continue
            for error in option.check(data):
                report.add_error(error)
        return report

    def matches(self, query: str) -> bool:
        """Case-insensitive match against id, name, description and tags."""
        needle = query.lower()
        haystack = [self.id, self.display_name, self.description, *self.tags]
        return any(needle in item.lower() for item in haystack)


class Restrictions(BaseModel):
    requires_parent: list[Category] = Field(default_factory=list)
    forbidden_with: list[Category] = Field(default_factory=list)
    max_count: int | None = None

    model_config = ConfigDict(frozen=True)


class CompatibilityRule(BaseModel):
    """
    Per-category placement rule.

    Attributes:
        category: Category this rule governs
        allowed_in: Workspaces the category may appear in
        dependencies: Categories that must co-occur (ancestor or sibling)
        restrictions: Nesting / co-occurrence / count limits
    """

    category: Category
    allowed_in: list[WorkspaceContext]
    dependencies: list[Category] = Field(default_factory=list)
    restrictions: Restrictions | None = None

    model_config = ConfigDict(frozen=True)
