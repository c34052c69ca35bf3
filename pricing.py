"""Quote calculation over the rank ladder"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Callable, Iterable, List, Mapping
import math

from tickets_errors import ConfigurationMissing, InvalidRange, InvalidRank


class RankLadder:
    """Ordered rank names, lowest first"""

    def __init__(self, ranks: Iterable[str]):
        ranks = list(ranks)
        if not ranks:
            raise ConfigurationMissing("RANKS", "rank ladder is empty")
        if len(set(ranks)) != len(ranks):
            raise ConfigurationMissing("RANKS", "rank ladder has duplicates")
        self._ranks: List[str] = ranks
        self._index = {name: i for i, name in enumerate(ranks)}

    def __len__(self) -> int:
        return len(self._ranks)

    def __iter__(self):
        return iter(self._ranks)

    def __contains__(self, rank) -> bool:
        return rank in self._index

    def index_of(self, rank: str) -> int:
        try:
            return self._index[rank]
        except (KeyError, TypeError):
            raise InvalidRank(rank) from None

    def name_at(self, index: int) -> str:
        if not self.has_index(index):
            raise InvalidRank(index)
        return self._ranks[index]

    def has_index(self, index) -> bool:
        return isinstance(index, int) and 0 <= index < len(self._ranks)


# ---------- STEP COST POLICIES ----------
# cost(i) is the price of climbing from ranks[i] to ranks[i + 1]

StepCostPolicy = Callable[[int], int]


class TieredStepCost:
    def __init__(self, base: int = 100, increment: int = 10):
        if base < 0 or increment < 0:
            raise ConfigurationMissing("PRICING", "tiered costs must be non-negative")
        self.base = base
        self.increment = increment

    def __call__(self, index: int) -> int:
        return self.base + self.increment * index

    def describe(self) -> str:
        return f"starts at {self.base} and increases by +{self.increment} each step"


class FlatStepCost:
    def __init__(self, per_level: int = 50):
        if per_level < 0:
            raise ConfigurationMissing("PRICING", "per-level cost must be non-negative")
        self.per_level = per_level

    def __call__(self, index: int) -> int:
        return self.per_level

    def describe(self) -> str:
        return f"flat {self.per_level} per level"


def policy_from_config(pricing: Mapping) -> StepCostPolicy:
    """Build a step cost policy from a config.PRICING style mapping"""
    kind = str(pricing.get("policy", "tiered")).lower()
    if kind == "tiered":
        return TieredStepCost(int(pricing.get("base", 100)), int(pricing.get("increment", 10)))
    if kind == "flat":
        return FlatStepCost(int(pricing.get("per_level", 50)))
    raise ConfigurationMissing("PRICING_POLICY", f"unknown policy {kind!r}")


# ---------- QUOTES ----------

@dataclass(frozen=True)
class Quote:
    from_rank: str
    to_rank: str
    from_index: int
    to_index: int
    step_count: int
    net_price: int
    gross_price: int
    first_step_cost: int
    last_step_cost: int

    def summary(self) -> str:
        return (
            f"{self.from_rank} → {self.to_rank} ({self.step_count} steps) | "
            f"Net: {format_robux(self.net_price)} | Gamepass (est): {format_robux(self.gross_price)}"
        )


def net_price(from_index: int, to_index: int, policy: StepCostPolicy) -> int:
    return sum(policy(i) for i in range(from_index, to_index))


def gross_from_net(net: int, fee_ratio: float) -> int:
    """Sticker price so the seller still receives `net` after the platform fee"""
    if not 0 <= fee_ratio < 1:
        raise ConfigurationMissing("FEE_RATIO", f"must be in [0, 1), got {fee_ratio!r}")
    # Fraction(str(...)) keeps 0.3 exact, so 210 / 0.7 is exactly 300
    keep = 1 - Fraction(str(fee_ratio))
    return math.ceil(Fraction(net) / keep)


def compute_quote(
    from_rank: str,
    to_rank: str,
    ladder: RankLadder,
    policy: StepCostPolicy,
    fee_ratio: float,
) -> Quote:
    from_index = ladder.index_of(from_rank)
    to_index = ladder.index_of(to_rank)

    step_count = to_index - from_index
    if step_count <= 0:
        raise InvalidRange(from_rank, to_rank)

    net = net_price(from_index, to_index, policy)
    return Quote(
        from_rank=from_rank,
        to_rank=to_rank,
        from_index=from_index,
        to_index=to_index,
        step_count=step_count,
        net_price=net,
        gross_price=gross_from_net(net, fee_ratio),
        first_step_cost=policy(from_index),
        last_step_cost=policy(to_index - 1),
    )


def format_robux(amount) -> str:
    return f"{int(amount):,}"
