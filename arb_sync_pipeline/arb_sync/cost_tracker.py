from dataclasses import dataclass

@dataclass
class CostTracker:
    """Character counter; the translation provider bills per source character."""
    cost_per_million: float = 10.0
    source_chars: int = 0
    target_chars: int = 0
    calls: int = 0

    def add(self, source_chars: int, target_chars: int) -> None:
        self.source_chars += source_chars
        self.target_chars += target_chars
        self.calls += 1

    @property
    def est_cost_usd(self) -> float:
        return (self.source_chars / 1_000_000.0) * self.cost_per_million
