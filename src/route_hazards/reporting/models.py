"""Reporting data models."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum


class Priority(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    STANDARD = "STANDARD"


@dataclass
class Recommendation:
    """A single route-safety advisory.

    Args:
        priority: ``CRITICAL``, ``HIGH`` or ``STANDARD`` for generated blocks;
            forwarded analyzer advisories keep whatever priority they carry.
        category: Machine-readable grouping such as ``sharp_turns``.
        title: One-line headline.
        description: Short explanation of the hazard.
        actions: Ordered list of concrete driver/fleet actions.
    """

    priority: str
    category: str
    title: str
    description: str
    actions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)
