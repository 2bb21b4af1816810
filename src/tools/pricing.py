"""Painter price estimate.

Net and VAT are each rounded to cents (half-up) before they are added, so
``gross == round2(net) + round2(vat)`` holds exactly.  Amounts are computed
in ``Decimal`` and only converted to ``float`` for the JSON payload.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from src.catalog import AgentSettings
from src.tools.schemas import PriceEstimate, PriceEstimateArgs, PriceEstimateResult

_CENT = Decimal("0.01")


def round2(value: float) -> Decimal:
    """Round to two decimals, half-up, from the shortest float representation.

    So ``1.005`` rounds to ``1.01``, although its exact binary value lies just
    below the midpoint and would round down to ``1.00``.

    Raises ``decimal.InvalidOperation`` for NaN and infinities.
    """
    return Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def net_amount(args: PriceEstimateArgs, settings: AgentSettings) -> float:
    """Unrounded net price including the travel surcharge."""
    rules = settings.pricing
    base = rules.premium_rate if args.paint_quality == "premium" else rules.basic_rate

    ceiling = args.ceiling_height if args.ceiling_height is not None else rules.reference_ceiling_height
    height_factor = max(1, ceiling / rules.reference_ceiling_height)

    rooms = args.rooms if args.rooms is not None else 1
    room_factor = 1 + rules.extra_room_factor * max(0, rooms - 1)

    travel = rules.travel_surcharge if args.location_postal_code else 0
    return args.square_meters * base * height_factor * room_factor + travel


def get_price_estimate(args: PriceEstimateArgs, settings: AgentSettings) -> PriceEstimateResult:
    net = net_amount(args, settings)
    net_rounded = round2(net)
    vat = round2(net * settings.pricing.vat_rate)
    gross = net_rounded + vat

    return PriceEstimateResult(
        estimate=PriceEstimate(net=float(net_rounded), vat=float(vat), gross=float(gross)),
        disclaimer=settings.pricing.disclaimer,
    )
