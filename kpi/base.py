"""
kpi/base.py

Abstract base class for portfolio formula implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BaseKPIFormula(ABC):
    """
    Contract for portfolio formula implementations.

    Subclasses receive a plain dictionary of inputs (typically the client
    records plus a reference date) and return a plain dictionary of computed
    values.

    No I/O, no logging, and no side effects are permitted inside
    :meth:`calculate`.
    """

    @abstractmethod
    def calculate(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """
        Compute metrics from *inputs* and return a result dictionary.
        """
