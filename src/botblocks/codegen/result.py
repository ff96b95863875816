"""
Generator result type.
"""

from dataclasses import dataclass, field
from typing import Any

from botblocks.core.ir import ValidationReport


@dataclass
class GeneratorResult:
    """
    What one generator run produced.

    ``artifacts`` holds the outputs by name (``source``, ``factories``).
    Problems met on the way land in ``report``; a result with errors still
    carries its artifacts.
    """

    artifacts: dict[str, Any] = field(default_factory=dict)
    report: ValidationReport = field(default_factory=ValidationReport)

    @property
    def errors(self) -> list[str]:
        return self.report.errors

    @property
    def warnings(self) -> list[str]:
        return self.report.warnings

    @property
    def success(self) -> bool:
        return self.report.is_valid

    @property
    def source(self) -> str:
        return self.artifacts.get("source", "")

    def add_artifact(self, key: str, value: Any) -> None:
        self.artifacts[key] = value

    def add_error(self, error: str) -> None:
        self.report.add_error(error)

    def add_warning(self, warning: str) -> None:
        self.report.add_warning(warning)

    def merge(self, other: "GeneratorResult") -> None:
        """Fold another run's artifacts and findings into this one."""
        self.artifacts.update(other.artifacts)
        self.report.merge(other.report)
