from __future__ import annotations

import pytest

from propval.records.models import PropertyRecord

_SQFT = [1200, 1500, 1800, 2100, 2400, 1350, 1650, 1950, 2250, 2700, 1400, 2000]
_BEDS = [2, 3, 3, 4, 4, 2, 3, 5, 3, 5, 4, 2]
_BATHS = [1, 2, 2, 3, 2, 1, 2, 3, 3, 4, 1, 2]
_YEARS = [1980, 1995, 2001, 1975, 2010, 1988, 2005, 1999, 2015, 1992, 1970, 2008]
_LOTS = [5000, 6200, 7000, 8100, 9000, 4800, 6600, 7500, 8800, 11000, 5300, 7200]


def exact_value(sqft: float, beds: float, baths: float, year: float, lot: float) -> float:
    return 20000 + 100 * sqft + 5000 * beds + 2000 * baths + 300 * (year - 1950) + 1.5 * lot


@pytest.fixture
def linear_records() -> list[PropertyRecord]:
    """Twelve parcels whose value is an exact linear function of all five features."""
    out = []
    for i, (s, b, ba, y, lot) in enumerate(zip(_SQFT, _BEDS, _BATHS, _YEARS, _LOTS)):
        out.append(
            PropertyRecord(
                parcel_id=f"T-{i:03d}",
                square_feet=s,
                bedrooms=b,
                bathrooms=ba,
                year_built=y,
                lot_size=lot,
                value=str(exact_value(s, b, ba, y, lot)),
            )
        )
    return out
