from __future__ import annotations

import csv
from collections.abc import Iterable, Mapping
from io import StringIO
from pathlib import Path
from typing import Any

from ..records.models import PropertyRecord, as_records
from ..utils.io import read_rows

# Residential parcels; empty cells are missing attributes.
_SAMPLE_CSV = """parcel_id,address,square_feet,bedrooms,bathrooms,year_built,lot_size,value
BC-1001,112 Alder Ct,1450,3,2,1988,6500,262000
BC-1002,87 Birch Ln,1820,3,2,1995,7200,298500
BC-1003,4410 Canyon Rd,2400,4,3,2005,9000,401000
BC-1004,19 Dogwood St,1100,2,1,1962,5000,182300
BC-1005,760 Elm Ave,2050,4,2,1978,8100,334900
BC-1006,3 Fir Pl,1675,3,2,2012,5800,291200
BC-1007,2200 Granite Dr,3100,5,4,2018,12000,505500
BC-1008,51 Hazel St,1300,2,1,1955,4800,198700
BC-1009,908 Iris Way,2250,4,3,1999,,366400
BC-1010,14 Juniper Ct,1950,3,2,,7600,321700
BC-1011,6320 Knoll Rd,2700,4,3,2009,10500,425800
BC-1012,77 Laurel Ave,1580,3,1,1971,6900,259300
BC-1013,402 Maple St,1230,2,2,2001,4200,233900
BC-1014,1150 Nutmeg Ln,2880,5,3,1992,11200,444100
BC-1015,35 Oak Ct,1760,3,2,1984,7000,287300
BC-1016,819 Pine St,2125,4,2,2015,6400,362800
BC-1017,26 Quail Run,1390,,1,1968,5500,227600
BC-1018,5005 Ridge Rd,2580,4,3,1980,9800,403200
BC-1019,640 Spruce Ave,1900,3,2,2003,8300,315800
BC-1020,93 Tamarack Dr,2320,4,2,1990,8800,371900
BC-1021,8 Union St,980,2,1,1949,3900,166400
BC-1022,7100 Vista Ridge,3350,5,4,2021,13500,521700
BC-1023,215 Willow Ct,1620,3,2,1997,,289900
BC-1024,48 Yew Ln,2000,3,3,2010,7900,336200
BC-1025,130 Zinnia Way,1700,3,2,1993,6800,
"""

_TEXT_COLUMNS = {"parcel_id", "parcelId", "address"}


def _coerce_cell(column: str, cell: Any) -> Any:
    if not isinstance(cell, str):
        return cell
    text = cell.strip()
    if text == "":
        return None
    if column in _TEXT_COLUMNS:
        return text
    try:
        return float(text)
    except ValueError:
        return text


def rows_to_records(rows: Iterable[Mapping[str, Any]]) -> list[PropertyRecord]:
    """Convert raw rows (e.g. CSV strings) into records; numeric strings become numbers."""
    return as_records({k: _coerce_cell(k, v) for k, v in row.items()} for row in rows)


def load_sample_properties() -> list[PropertyRecord]:
    """Bundled residential sample: 25 parcels, one without an assessed value."""
    return rows_to_records(csv.DictReader(StringIO(_SAMPLE_CSV)))


def load_records(path: str | Path) -> list[PropertyRecord]:
    """Load property records from CSV, JSON or JSON Lines.

    ``"sample"`` returns the bundled dataset.
    """
    if str(path) == "sample":
        return load_sample_properties()
    return rows_to_records(read_rows(path))
