# shop_v2/domain/delivery_fees.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

# ============================================================
# Regions
# ============================================================

GhanaRegion = Literal[
    "greater-accra",
    "ashanti",
    "western",
    "eastern",
    "central",
    "volta",
    "northern",
    "upper-east",
    "upper-west",
    "bono",
    "bono-east",
    "ahafo",
    "savannah",
    "north-east",
    "oti",
    "western-north",
]

GHANA_REGIONS: Tuple[str, ...] = (
    "greater-accra",
    "ashanti",
    "western",
    "eastern",
    "central",
    "volta",
    "northern",
    "upper-east",
    "upper-west",
    "bono",
    "bono-east",
    "ahafo",
    "savannah",
    "north-east",
    "oti",
    "western-north",
)

# Flat delivery fee per region (GHS)
DELIVERY_FEES: Dict[str, float] = {
    "greater-accra": 20,
    "ashanti": 35,
    "western": 45,
    "eastern": 30,
    "central": 35,
    "volta": 40,
    "northern": 60,
    "upper-east": 70,
    "upper-west": 70,
    "bono": 50,
    "bono-east": 55,
    "ahafo": 50,
    "savannah": 65,
    "north-east": 65,
    "oti": 45,
    "western-north": 50,
}

DEFAULT_DELIVERY_FEE: float = 50


@dataclass(frozen=True)
class RegionFee:
    region: str
    fee: float
    label: str


def region_label(region: str) -> str:
    """
    "greater-accra" -> "Greater Accra"
    """
    return " ".join(word[:1].upper() + word[1:] for word in region.split("-"))


GHANA_REGION_LABELS: Dict[str, str] = {r: region_label(r) for r in GHANA_REGIONS}


def is_valid_region(region: Any) -> bool:
    return isinstance(region, str) and region in DELIVERY_FEES


def calculate_delivery_fee(region: Optional[str]) -> float:
    """
    Flat fee for a known region, DEFAULT_DELIVERY_FEE for anything else.
    Never raises.
    """
    if is_valid_region(region):
        return DELIVERY_FEES[region]
    return DEFAULT_DELIVERY_FEE


def get_delivery_fee_from_address(address: Mapping[str, Any] | Any) -> float:
    """
    Accepts a mapping or an object with a `region` attribute.
    """
    if isinstance(address, Mapping):
        region = address.get("region")
    else:
        region = getattr(address, "region", None)

    if not region:
        return DEFAULT_DELIVERY_FEE
    return calculate_delivery_fee(region)


def list_regions_with_fees() -> List[RegionFee]:
    # sorted() is stable: equal fees keep GHANA_REGIONS order
    return sorted(
        (
            RegionFee(region=r, fee=DELIVERY_FEES[r], label=GHANA_REGION_LABELS[r])
            for r in GHANA_REGIONS
        ),
        key=lambda rf: rf.fee,
    )
