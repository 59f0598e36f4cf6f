"""Validator for i18next ``{{variable}}`` interpolation markers."""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass
class InterpolationProblem:
    """Represents an interpolation validation problem in one value."""

    error_type: str  # unbalanced, empty, malformed
    message: str
    severity: str  # error, warning
    details: Dict[str, Any] = field(default_factory=dict)


class InterpolationValidator:
    """
    Validates interpolation markers in translation values.

    With the default i18next markers:
    - ``{{name}}`` - variable
    - ``{{count, number}}`` - variable with format
    - ``{{ }}`` - empty marker (warning)
    - ``{name}`` - single-brace, likely malformed (warning)
    """

    # Single-brace groups that are not part of a double-brace marker
    MALFORMED_PATTERN = re.compile(r"\{[^{}]*\}[^}]|[^{]\{[^{}]*\}")

    def __init__(self, prefix: str = "{{", suffix: str = "}}"):
        self.prefix = prefix
        self.suffix = suffix
        p, s = re.escape(prefix), re.escape(suffix)
        self._empty_pattern = re.compile(rf"{p}\s*{s}")
        self._variable_pattern = re.compile(rf"{p}(.*?){s}")

    def validate(self, value: str) -> List[InterpolationProblem]:
        """
        Check a single value for interpolation problems.

        Args:
            value: Translation string

        Returns:
            List of problems (empty when the value is fine)
        """
        problems = []

        open_count = value.count(self.prefix)
        close_count = value.count(self.suffix)
        if open_count != close_count:
            problems.append(
                InterpolationProblem(
                    error_type="unbalanced",
                    message=f"Interpolation markers are unbalanced: {open_count} opening, "
                    f"{close_count} closing",
                    severity="error",
                    details={"open_count": open_count, "close_count": close_count},
                )
            )

        empty = self._empty_pattern.findall(value)
        if empty:
            problems.append(
                InterpolationProblem(
                    error_type="empty",
                    message="Empty interpolation marker",
                    severity="warning",
                    details={"empty_count": len(empty)},
                )
            )

        malformed = self.MALFORMED_PATTERN.findall(value)
        if malformed:
            problems.append(
                InterpolationProblem(
                    error_type="malformed",
                    message="Potentially malformed interpolation",
                    severity="warning",
                    details={"matches": malformed},
                )
            )

        return problems

    def extract_variables(self, value: str) -> List[str]:
        """Extract variable names, in order of appearance, without duplicates."""
        names = []
        for match in self._variable_pattern.finditer(value):
            # "{{count, number}}" -> "count"
            name = match.group(1).split(",")[0].strip()
            if name not in names:
                names.append(name)
        return names

    def compare(self, source: str, translation: str) -> Tuple[List[str], List[str]]:
        """
        Compare variable sets of a source value and its translation.

        Returns:
            Tuple of (missing in translation, extra in translation)
        """
        source_vars = self.extract_variables(source)
        trans_vars = self.extract_variables(translation)
        missing = [name for name in source_vars if name not in trans_vars]
        extra = [name for name in trans_vars if name not in source_vars]
        return missing, extra
