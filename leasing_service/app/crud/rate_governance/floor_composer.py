"""Floor-level rent composition.

A unit's base rent is the sum of ``area * rate`` over its floors. Units without
floor records fall back to their stored totals. Everything here is a pure
function of its inputs so it can be re-run whenever a floor changes.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _dec(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class FloorRentLine:
    floor_id: Any
    floor_type: Optional[str]
    area: Decimal
    standard_rate: Decimal
    rate: Decimal
    rent: Decimal
    is_rate_overridden: bool = False


@dataclass(frozen=True)
class FloorComposition:
    base_rent: Decimal
    base_area: Decimal
    lines: Tuple[FloorRentLine, ...] = ()
    warnings: Tuple[str, ...] = ()
    from_floors: bool = True


def floor_rent(area, rate) -> Decimal:
    """Rent for one floor. Non-positive areas contribute nothing."""
    area = _dec(area)
    if area <= 0:
        return ZERO
    return area * _dec(rate)


def compose_floors(
    floors: Iterable[Any],
    fallback_area=None,
    fallback_rent=None,
    rate_overrides: Optional[Mapping[Any, Any]] = None,
) -> FloorComposition:
    """Compose a unit's base rent from its floors.

    ``floors`` is any iterable of objects exposing ``id``, ``area``, ``rate`` and
    optionally ``floor_type`` (ORM rows or plain records). ``rate_overrides``
    maps a floor id to the rate negotiated for a prospective lease; the floor's
    rent is recomputed with that rate before it contributes to the total.
    """
    rate_overrides = rate_overrides or {}
    lines: List[FloorRentLine] = []
    warnings: List[str] = []

    for floor in floors:
        floor_id = getattr(floor, "id", None)
        floor_type = getattr(floor, "floor_type", None)
        area = _dec(getattr(floor, "area", None))
        standard_rate = _dec(getattr(floor, "rate", None))
        overridden = floor_id in rate_overrides and rate_overrides[floor_id] is not None
        rate = _dec(rate_overrides[floor_id]) if overridden else standard_rate

        if area <= 0:
            warnings.append(
                f"Floor {floor_id} ({floor_type or 'floor'}) has non-positive area {area}; contributes no rent")

        lines.append(FloorRentLine(
            floor_id=floor_id,
            floor_type=floor_type,
            area=area,
            standard_rate=standard_rate,
            rate=rate,
            rent=floor_rent(area, rate),
            is_rate_overridden=overridden,
        ))

    known_ids = {line.floor_id for line in lines}
    unknown = [floor_id for floor_id in rate_overrides if floor_id not in known_ids]
    for floor_id in unknown:
        warnings.append(f"Rate override for unknown floor {floor_id} ignored")

    for message in warnings:
        logger.warning(message)

    if not lines:
        return FloorComposition(
            base_rent=_dec(fallback_rent),
            base_area=_dec(fallback_area),
            warnings=tuple(warnings),
            from_floors=False,
        )

    return FloorComposition(
        base_rent=sum((l.rent for l in lines), ZERO),
        base_area=sum((l.area for l in lines if l.area > 0), ZERO),
        lines=tuple(lines),
        warnings=tuple(warnings),
    )


def compose_unit(unit, rate_overrides: Optional[Dict[Any, Any]] = None) -> FloorComposition:
    return compose_floors(
        unit.floors,
        fallback_area=unit.total_area,
        fallback_rent=unit.total_rent,
        rate_overrides=rate_overrides,
    )
