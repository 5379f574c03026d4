from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass
class EmaSmoother:
    """
    Exponential moving average: ``new = old * (1 - alpha) + raw * alpha``.

    The value starts at 0.0 rather than being seeded with the first raw
    sample, so the first few updates ramp up from zero.
    There is no gap handling here; callers decide when an update is valid and
    simply skip ``update`` otherwise, which leaves the value frozen.
    """
    alpha: float
    value: float = field(default=0.0, init=False)

    def update(self, raw: float) -> float:
        a = float(self.alpha)
        self.value = float(self.value) * (1.0 - a) + float(raw) * a
        return float(self.value)

    def reset(self) -> None:
        self.value = 0.0


@dataclass
class EmaSmoother2D:
    """Per-axis EMA for a 2D vector; both axes share ``alpha``."""
    alpha: float
    x: EmaSmoother = field(init=False)
    y: EmaSmoother = field(init=False)

    def __post_init__(self) -> None:
        self.x = EmaSmoother(alpha=self.alpha)
        self.y = EmaSmoother(alpha=self.alpha)

    @property
    def value(self) -> Tuple[float, float]:
        return (self.x.value, self.y.value)

    def update(self, raw_x: float, raw_y: float) -> Tuple[float, float]:
        return (self.x.update(raw_x), self.y.update(raw_y))

    def reset(self) -> None:
        self.x.reset()
        self.y.reset()
