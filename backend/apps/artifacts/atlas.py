"""Historical overlays for the atlas view.

Years are signed: negative for BCE, positive for CE.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from apps.artifacts import models

DEFAULT_EVENT_MARGIN = 50


@dataclass(frozen=True)
class HistoricalEvent:
    id: str
    title: str
    description: str
    year: int
    coordinates: tuple[float, float]  # (longitude, latitude)
    radius_km: int
    tag: str

    def as_payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Civilisation:
    id: str
    name: str
    description: str
    start_year: int
    end_year: int
    color: str
    polygon: tuple[tuple[float, float], ...]

    def covers(self, year: int) -> bool:
        return self.start_year <= year <= self.end_year

    def as_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "start_year": self.start_year,
            "end_year": self.end_year,
            "color": self.color,
            "geometry": {
                "type": "Polygon",
                "coordinates": [[list(point) for point in self.polygon]],
            },
        }


HISTORICAL_EVENTS: tuple[HistoricalEvent, ...] = (
    HistoricalEvent(
        id="troy-war",
        title="The Siege of Troy",
        description="The legendary decade-long Greek siege of the Anatolian city of Troy.",
        year=-1250,
        coordinates=(26.2393, 39.9575),
        radius_km=50,
        tag="War",
    ),
    HistoricalEvent(
        id="rome-founding",
        title="Kingdom of Rome Established",
        description="Legendary founding of Rome by Romulus.",
        year=-753,
        coordinates=(12.4964, 41.9028),
        radius_km=30,
        tag="Culture",
    ),
    HistoricalEvent(
        id="alexander-persia",
        title="Alexander Enters Babylon",
        description="Alexander the Great enters the capital of the Persian Empire.",
        year=-331,
        coordinates=(44.4208, 32.5401),
        radius_km=100,
        tag="War",
    ),
    HistoricalEvent(
        id="pompeii-eruption",
        title="Eruption of Mount Vesuvius",
        description="Volcanic eruption burying Pompeii and Herculaneum.",
        year=79,
        coordinates=(14.4848, 40.7489),
        radius_km=20,
        tag="Natural",
    ),
    HistoricalEvent(
        id="byzantium-conquest",
        title="Fall of Constantinople",
        description="The Ottoman conquest of the Byzantine capital.",
        year=1453,
        coordinates=(28.9784, 41.0082),
        radius_km=80,
        tag="War",
    ),
    HistoricalEvent(
        id="knossos-palace",
        title="Zenith of Minoan Knossos",
        description="The peak of the Minoan civilization on Crete.",
        year=-1700,
        coordinates=(25.1631, 35.2980),
        radius_km=40,
        tag="Culture",
    ),
)

CIVILISATIONS: tuple[Civilisation, ...] = (
    Civilisation(
        id="ancient-egypt",
        name="Ancient Egypt",
        description=(
            "The Nile Valley civilization famous for its pharaohs, pyramids, and hieroglyphs."
        ),
        start_year=-3100,
        end_year=-30,
        color="#E5C158",
        polygon=((30, 22), (35, 22), (33, 31), (29, 31), (30, 22)),
    ),
    Civilisation(
        id="roman-empire",
        name="Roman Empire",
        description="The peak of Roman influence spanning the Mediterranean.",
        start_year=-27,
        end_year=476,
        color="#8B0000",
        polygon=((-10, 35), (45, 35), (45, 55), (-10, 55), (-10, 35)),
    ),
    Civilisation(
        id="sumer",
        name="Sumerian Civilization",
        description="The earliest known civilization in southern Mesopotamia.",
        start_year=-4500,
        end_year=-1900,
        color="#CD7F32",
        polygon=((42, 30), (48, 30), (48, 35), (42, 35), (42, 30)),
    ),
)

# Upper bound (inclusive) of each era, checked in order.
_ERA_BOUNDARIES: tuple[tuple[int, str], ...] = (
    (-2000, "Early Bronze"),
    (-1200, "Late Bronze"),
    (-700, "Iron Age"),
    (476, "Roman"),
    (1453, "Byzantine"),
)
_FINAL_ERA = "Post-Classical"


def events_for_year(year: int, margin: int = DEFAULT_EVENT_MARGIN) -> list[HistoricalEvent]:
    return [event for event in HISTORICAL_EVENTS if abs(event.year - year) <= margin]


def civilisations_for_year(year: int) -> list[Civilisation]:
    return [civilisation for civilisation in CIVILISATIONS if civilisation.covers(year)]


def era_for_year(year: int) -> str:
    for upper_bound, label in _ERA_BOUNDARIES:
        if year <= upper_bound:
            return label
    return _FINAL_ERA


def format_year(year: int) -> str:
    return f"{abs(year)} BCE" if year < 0 else f"{year} CE"


def artifact_markers(artifacts: Iterable[models.Artifact]) -> list[dict[str, Any]]:
    """Map markers for artifacts with usable coordinates; (0, 0) counts as unset."""

    return [
        {
            "id": str(artifact.id),
            "title": artifact.title,
            "classification": artifact.classification,
            "era": artifact.era,
            "latitude": artifact.latitude,
            "longitude": artifact.longitude,
            "image_url": artifact.primary_image_url(),
        }
        for artifact in artifacts
        if artifact.has_coordinates
    ]


def atlas_snapshot(year: int, artifacts: Iterable[models.Artifact]) -> dict[str, Any]:
    return {
        "year": year,
        "year_label": format_year(year),
        "era": era_for_year(year),
        "events": [event.as_payload() for event in events_for_year(year)],
        "civilisations": [civ.as_payload() for civ in civilisations_for_year(year)],
        "markers": artifact_markers(artifacts),
    }


__all__ = [
    "CIVILISATIONS",
    "Civilisation",
    "HISTORICAL_EVENTS",
    "HistoricalEvent",
    "artifact_markers",
    "atlas_snapshot",
    "civilisations_for_year",
    "era_for_year",
    "events_for_year",
    "format_year",
]
