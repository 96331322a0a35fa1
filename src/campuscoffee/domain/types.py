"""Classification enums for Points of Sale.

Both enumerations are closed: a value outside the members (or outside the
subset a deployment configures in ``[pos]``) is a validation error.
"""

from __future__ import annotations

from enum import StrEnum


class PosType(StrEnum):
    """Kind of coffee-serving location."""

    CAFE = "CAFE"
    KIOSK = "KIOSK"
    VENDING_MACHINE = "VENDING_MACHINE"
    BAKERY = "BAKERY"
    CAFETERIA = "CAFETERIA"


class CampusType(StrEnum):
    """Campus area a POS belongs to."""

    CENTRAL = "CENTRAL"
    NORTH = "NORTH"
    SOUTH = "SOUTH"
    EAST = "EAST"
    WEST = "WEST"
