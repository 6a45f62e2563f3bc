"""Lookup tables shared by the enrichment and presentation layers.

All tables are read-only mappings; pass them (or replacements) into the
components that need them instead of importing them inline.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

PRECINCT_NAMES: Mapping[int, str] = MappingProxyType({
    0: "Alabang",
    1: "Bayanan",
    2: "Buli",
    3: "Cupang",
    4: "Poblacion",
    5: "Putatan",
    6: "Tunasan",
    7: "Ayala_Alabang",
    8: "Sucat",
})

CRIME_TYPE_NAMES: Mapping[int, str] = MappingProxyType({
    0: "Arson", 1: "Assault", 2: "Burglary", 3: "Corruption", 4: "Counterfeiting",
    5: "Cyber Crime", 6: "Domestic Violence", 7: "Drug Trafficking", 8: "Embezzlement",
    9: "Extortion", 10: "Fraud", 11: "Human Trafficking", 12: "Homicide",
    13: "Illegal Possession Of Firearms", 14: "Kidnapping", 15: "Murder", 16: "Rape",
    17: "Robbery", 18: "Theft", 19: "Vandalism",
})

# Approximate precinct centres used when no cluster matches a forecast
PRECINCT_COORDINATES: Mapping[int, tuple[float, float]] = MappingProxyType({
    1: (40.7831, -73.9712),
    2: (40.7589, -73.9851),
    3: (40.7505, -73.9934),
    4: (40.7505, -74.0134),
    5: (40.7282, -73.9942),
    6: (40.7505, -73.9742),
    7: (40.7192, -74.0065),
    8: (40.7831, -73.9512),
    9: (40.7589, -73.9651),
    10: (40.7505, -73.9542),
})
DEFAULT_COORDINATES = (40.7589, -73.9851)

RISK_LEVEL_COLORS: Mapping[str, str] = MappingProxyType({
    "low": "#10B981",
    "medium": "#F59E0B",
    "high": "#EF4444",
    "critical": "#7C2D12",
})

TIME_OF_DAY_COLORS: Mapping[str, str] = MappingProxyType({
    "morning": "#FED7AA",
    "afternoon": "#FDE68A",
    "evening": "#D8B4FE",
    "night": "#A7F3D0",
})

# Ordered from best to worst
RELIABILITY_THRESHOLDS: Mapping[str, float] = MappingProxyType({
    "excellent": 0.8,
    "good": 0.6,
    "fair": 0.4,
    "poor": 0.2,
})


@dataclass(frozen=True)
class LookupTables:
    """Bundle of display lookups injected into the presentation layer."""

    precinct_names: Mapping[int, str] = field(default_factory=lambda: PRECINCT_NAMES)
    crime_type_names: Mapping[int, str] = field(default_factory=lambda: CRIME_TYPE_NAMES)
    risk_colors: Mapping[str, str] = field(default_factory=lambda: RISK_LEVEL_COLORS)
    time_of_day_colors: Mapping[str, str] = field(default_factory=lambda: TIME_OF_DAY_COLORS)
    reliability_thresholds: Mapping[str, float] = field(default_factory=lambda: RELIABILITY_THRESHOLDS)

    def precinct_name(self, precinct: int) -> str:
        return self.precinct_names.get(precinct, f"Precinct {precinct}")

    def crime_type_name(self, crime_type: int) -> str:
        return self.crime_type_names.get(crime_type, f"Crime Type {crime_type}")


DEFAULT_LOOKUPS = LookupTables()
