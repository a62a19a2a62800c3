from typing import Any

from nycsales.models.yaml_enum import YamlEnum

UNKNOWN_BOROUGH = "Unknown"


class Borough(YamlEnum):
    MANHATTAN = "Manhattan"
    BRONX = "Bronx"
    BROOKLYN = "Brooklyn"
    QUEENS = "Queens"
    STATEN_ISLAND = "Staten Island"

    @property
    def code(self) -> int:
        """Department of Finance borough code (1-5)."""
        return list(Borough).index(self) + 1

    @classmethod
    def from_code(cls, code: Any) -> "Borough | None":
        """Return the borough for a DOF code, or None if the code is not 1-5.

        Accepts ints, floats with no fractional part and numeric strings
        such as ``"3"`` or ``"3.0"``.
        """
        try:
            value = float(str(code).strip())
        except (TypeError, ValueError):
            return None

        if not value.is_integer():
            return None

        boroughs = list(cls)
        index = int(value) - 1
        if 0 <= index < len(boroughs):
            return boroughs[index]
        return None

    @property
    def file_stem(self) -> str:
        """Name fragment used by the rolling sales exports, e.g. ``statenisland``."""
        return self.value.lower().replace(" ", "")
