"""
Engine configuration

Shared defaults consulted by the differentiation engine, the graph dump and
the neural-network initialisers when a call site does not pass its own value.
"""

from dataclasses import dataclass
from typing import Tuple

ORDERS = ("topological", "trace")


@dataclass
class EngineConfig:
    """Configuration for gradient passes, graph dumps and weight init."""
    # Propagation order used by backward(): 'topological' or 'trace'
    order: str = 'topological'
    # Warn when the trace order visits a node before all of its parents
    warn_on_trace_order: bool = True

    # Decimal places for data/grad in graph dumps
    display_precision: int = 4

    # Uniform weight initialisation range [init_low, init_high)
    init_low: float = -1.0
    init_high: float = 1.0

    def validate(self) -> "EngineConfig":
        """
        Check the configuration and return it.

        Raises:
            ValueError: unknown order, negative precision or empty init range
        """
        if self.order not in ORDERS:
            raise ValueError(f"order must be one of {ORDERS}, got {self.order!r}")
        if self.display_precision < 0:
            raise ValueError("display_precision must be non-negative")
        if not self.init_low < self.init_high:
            raise ValueError(
                f"empty init range [{self.init_low}, {self.init_high})"
            )
        return self

    @property
    def init_range(self) -> Tuple[float, float]:
        return self.init_low, self.init_high


default_config = EngineConfig()
