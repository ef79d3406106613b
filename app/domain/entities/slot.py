from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from enum import Enum


class SlotStatus(str, Enum):
    available = "available"
    taken = "taken"
    hidden = "hidden"


@dataclass(frozen=True)
class SlotAvailability:
    time: time
    status: SlotStatus
