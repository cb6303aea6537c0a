from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GateResult:
    ok: bool
    reason: Optional[str] = None
