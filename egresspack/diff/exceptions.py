"""Regression assertion failures."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from egresspack.diff.models import RegressionReport


class RegressionFailure(AssertionError):
    """Captured artifacts diverged from their accepted baselines.

    Subclasses `AssertionError` so test runners report it as a failed test
    rather than an error.
    """

    def __init__(self, message: str, reports: "list[RegressionReport]") -> None:
        super().__init__(message)
        self.reports = reports
