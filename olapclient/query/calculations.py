"""
Calculations: derived features a backend computes over the aggregated data.

Each kind has a record class and a builder that resolves the operands
against a cube. Builders are looked up in :data:`CALCULATION_BUILDERS`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

from ..common import parse_numeric
from ..enums import Calculation, Direction
from ..errors import ArgumentError
from ..metadata import Level, Measure

if TYPE_CHECKING:
    from ..metadata import Cube

__all__ = [
    "GrowthCalculation",
    "RcaCalculation",
    "TopkCalculation",
    "QueryCalculation",
    "CALCULATION_BUILDERS",
    "build_calculation",
    "describe_level",
    "plain_reference",
]


def describe_level(level: Level) -> dict[str, str]:
    """Level descriptor without the server and cube fields."""
    return level.descriptor.to_dict(skim=True)


def plain_reference(item: Any) -> str:
    """Full name of levels and properties, name of measures, value of
    enumerations and the item itself otherwise."""
    if isinstance(item, Level):
        return item.full_name
    if isinstance(item, Measure):
        return item.name
    if isinstance(item, Calculation | Direction):
        return item.value
    if hasattr(item, "full_name"):
        return item.full_name
    return str(item)


@dataclass(frozen=True, slots=True)
class GrowthCalculation:
    """Growth of `value` along the members of the `category` level."""

    category: Level
    value: Measure

    kind = Calculation.GROWTH

    def operands(self) -> dict[str, Any]:
        return {"category": self.category, "value": self.value}

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "category": describe_level(self.category),
            "value": self.value.name,
        }

    @property
    def key(self) -> str:
        return calculation_key(self)


@dataclass(frozen=True, slots=True)
class RcaCalculation:
    """Revealed comparative advantage of `location` members over `category`
    members, computed over `value`."""

    location: Level
    category: Level
    value: Measure

    kind = Calculation.RCA

    def operands(self) -> dict[str, Any]:
        return {"location": self.location, "category": self.category, "value": self.value}

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "location": describe_level(self.location),
            "category": describe_level(self.category),
            "value": self.value.name,
        }

    @property
    def key(self) -> str:
        return calculation_key(self)


@dataclass(frozen=True, slots=True)
class TopkCalculation:
    """The first `amount` members of `category`, ranked by `value`."""

    amount: int | float
    category: Level
    value: Measure | Calculation
    order: Direction = Direction.DESC

    kind = Calculation.TOPK

    def operands(self) -> dict[str, Any]:
        return {
            "amount": self.amount,
            "category": self.category,
            "value": self.value,
            "order": self.order,
        }

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "amount": self.amount,
            "category": describe_level(self.category),
            "value": plain_reference(self.value),
            "order": self.order.value,
        }

    @property
    def key(self) -> str:
        return calculation_key(self)


QueryCalculation: TypeAlias = GrowthCalculation | RcaCalculation | TopkCalculation


def calculation_key(calculation: QueryCalculation) -> str:
    """Deterministic identification: kind, then operands sorted by name."""
    operands = calculation.operands()
    tokens = [plain_reference(operands[name]) for name in sorted(operands)]
    return f"{calculation.kind.value}:{','.join(tokens)}"


def _require(params: Mapping[str, Any], *names: str) -> None:
    missing = [name for name in names if params.get(name) in (None, "")]
    if missing:
        raise ArgumentError(f"Missing calculation parameters: {', '.join(missing)}")


def build_growth(cube: Cube, params: Mapping[str, Any]) -> GrowthCalculation:
    _require(params, "category", "value")
    return GrowthCalculation(
        category=cube.get_level(params["category"]),
        value=cube.get_measure(params["value"]),
    )


def build_rate(cube: Cube, params: Mapping[str, Any]) -> QueryCalculation:
    raise ArgumentError("The 'rate' calculation is not implemented")


def build_rca(cube: Cube, params: Mapping[str, Any]) -> RcaCalculation:
    _require(params, "location", "category", "value")
    return RcaCalculation(
        location=cube.get_level(params["location"]),
        category=cube.get_level(params["category"]),
        value=cube.get_measure(params["value"]),
    )


def build_topk(cube: Cube, params: Mapping[str, Any]) -> TopkCalculation:
    _require(params, "amount", "category", "value")
    try:
        amount = parse_numeric(params["amount"])
    except ArgumentError:
        raise ArgumentError(
            f"Invalid value in argument amount: {params['amount']!r}"
        ) from None

    value = params["value"]
    calculation = Calculation.get(value) if isinstance(value, str) else None
    return TopkCalculation(
        amount=amount,
        category=cube.get_level(params["category"]),
        value=calculation or cube.get_measure(value),
        order=Direction.parse(params.get("order")),
    )


CALCULATION_BUILDERS: dict[Calculation, Callable[[Cube, Mapping[str, Any]], QueryCalculation]] = {
    Calculation.GROWTH: build_growth,
    Calculation.RATE: build_rate,
    Calculation.RCA: build_rca,
    Calculation.TOPK: build_topk,
}


def build_calculation(cube: Cube, kind: Any, params: Mapping[str, Any]) -> QueryCalculation:
    """
    Build a calculation record of `kind`, resolving its operands in `cube`.

    Raises:
        ArgumentError: If the kind is unknown or a parameter is invalid
        MissingObjectError: If a level or measure can not be resolved
    """
    calculation = Calculation.get(kind)
    if calculation is None:
        raise ArgumentError(f"Unknown calculation kind: {kind!r}")
    return CALCULATION_BUILDERS[calculation](cube, params)
