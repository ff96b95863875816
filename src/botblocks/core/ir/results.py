"""
Validation result types.

``ValidationResult`` answers a single question (may this block go here?).
``PropertyCheck`` is the outcome of one primitive wire-format check.
``ValidationReport`` folds many checks into errors and warnings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a single compatibility check.

    Attributes:
        is_valid: Whether the check passed
        reason: Human-readable explanation of a failure
        suggestions: Actionable hints derived from the violated rule
        severity: ERROR for hard failures, WARNING for soft ones
    """

    is_valid: bool
    reason: str | None = None
    suggestions: list[str] = field(default_factory=list)
    severity: Severity = Severity.ERROR

    @classmethod
    def ok(cls, reason: str | None = None) -> ValidationResult:
        return cls(is_valid=True, reason=reason, severity=Severity.INFO)

    @classmethod
    def fail(
        cls,
        reason: str,
        suggestions: list[str] | None = None,
        severity: Severity = Severity.ERROR,
    ) -> ValidationResult:
        return cls(is_valid=False, reason=reason, suggestions=list(suggestions or []), severity=severity)


@dataclass(frozen=True)
class PropertyCheck:
    """Outcome of one primitive property validator."""

    property: str
    is_valid: bool
    message: str | None = None
    severity: Severity = Severity.INFO


@dataclass
class ValidationReport:
    """
    Aggregated validation outcome.

    Attributes:
        errors: Problems that block emission
        warnings: Problems that should be addressed but do not block emission
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Whether validation succeeded (no errors)."""
        return len(self.errors) == 0

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def merge(self, other: ValidationReport, prefix: str = "") -> None:
        """Merge another report into this one, optionally prefixing messages."""
        self.errors.extend(f"{prefix}{e}" for e in other.errors)
        self.warnings.extend(f"{prefix}{w}" for w in other.warnings)

    def promote_warnings(self) -> None:
        """Turn every warning into an error (strict mode)."""
        self.errors.extend(self.warnings)
        self.warnings = []

    @classmethod
    def from_checks(cls, checks: list[PropertyCheck]) -> ValidationReport:
        """Fold property checks: error severity blocks emission, warning does not."""
        report = cls()
        for check in checks:
            if check.is_valid or not check.message:
                continue
            if check.severity == Severity.ERROR:
                report.add_error(check.message)
            elif check.severity == Severity.WARNING:
                report.add_warning(check.message)
        return report

    def to_dict(self) -> dict[str, object]:
        return {"isValid": self.is_valid, "errors": list(self.errors), "warnings": list(self.warnings)}
