"""
Project Module

Architectural Intent:
- Tracks one project's progress through a deployment
- Stage and failure are orthogonal: a failed project keeps the stage it
  last reported, so it can read "building" and "FAILED" at the same time
- Records are only mutated by the Deployment aggregate, under its lock
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
import re

# First word character not preceded by another word character
_WORD_START_RE = re.compile(r"(?<!\w)\w")


class Stage(Enum):
    NOT_DEPLOYING = "not deploying"
    BUILDING = "building"
    DEPLOYING = "deploying"
    SUCCEEDED = "succeeded"


@dataclass
class Project:
    """Tracked state for a single project."""
    name: str
    id: int
    start_time: datetime
    stage: Optional[Stage] = None
    end_time: Optional[datetime] = None
    failed: bool = False

    @property
    def display_name(self) -> str:
        """Name with each word capitalized; the rest of each word is kept as is."""
        return _WORD_START_RE.sub(lambda m: m.group().upper(), self.name)

    @property
    def is_successful(self) -> bool:
        return not self.failed and self.stage in (
            Stage.SUCCEEDED,
            Stage.NOT_DEPLOYING,
        )
