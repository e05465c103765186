"""Cost roll-up for APUs and projects.

Markups stack in a fixed order: indirects are charged on the direct cost,
profit on direct cost plus indirects. The per-type breakdown returned by
``aggregate`` is raw resource cost (no markup, no APU quantity) while
``total_price`` carries the markup; the two are reported side by side and
are not expected to reconcile.

Nothing here rounds or clamps. Negative inputs flow through arithmetically;
validation happens where values are edited.
"""
from typing import Iterable

from apu_estimator.schemas.project import Apu, ResourceType
from apu_estimator.schemas.reports import ApuCostOut, ProjectStats

_TYPE_FIELD = {
    ResourceType.MATERIAL: "material_cost",
    ResourceType.LABOR: "labor_cost",
    ResourceType.EQUIPMENT: "equipment_cost",
    ResourceType.TRANSPORT: "transport_cost",
}


def direct_cost(apu: Apu) -> float:
    return sum((r.price * r.quantity for r in apu.resources), 0.0)


def _markups(direct: float, indirects_pct: float, profit_pct: float) -> tuple[float, float]:
    indirects = direct * (indirects_pct / 100)
    profit = (direct + indirects) * (profit_pct / 100)
    return indirects, profit


def unit_price(apu: Apu) -> float:
    direct = direct_cost(apu)
    indirects, profit = _markups(direct, apu.indirects_percentage, apu.profit_percentage)
    return direct + indirects + profit


def total_price(apus: Iterable[Apu]) -> float:
    return sum((unit_price(a) * a.quantity for a in apus), 0.0)


def apu_breakdown(apu: Apu) -> ApuCostOut:
    direct = direct_cost(apu)
    indirects, profit = _markups(direct, apu.indirects_percentage, apu.profit_percentage)
    price = direct + indirects + profit
    return ApuCostOut(
        id=apu.id,
        code=apu.code,
        description=apu.description,
        unit=apu.unit,
        category=apu.category,
        quantity=apu.quantity,
        direct_cost=direct,
        indirects=indirects,
        profit=profit,
        unit_price=price,
        total=price * apu.quantity,
    )


def aggregate(apus: Iterable[Apu]) -> ProjectStats:
    apus = list(apus)
    by_type = {f: 0.0 for f in _TYPE_FIELD.values()}
    for apu in apus:
        for r in apu.resources:
            by_type[_TYPE_FIELD[r.type]] += r.price * r.quantity

    return ProjectStats(
        total_direct_cost=sum(by_type.values()),
        total_price=total_price(apus),
        **by_type,
    )
