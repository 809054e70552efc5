"""Inbound playlist payload models."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Map-link attribute names seen in upstream data, highest priority first.
MAP_LINK_KEYS: tuple[str, ...] = (
    "googleMapsUrl",
    "google_maps_url",
    "googleMapsLink",
    "mapsUrl",
    "maps_url",
    "mapUrl",
    "map_url",
    "mapLink",
    "map_link",
    "url",
)


def resolve_map_link(place: Mapping[str, Any]) -> str | None:
    """Return the first non-empty map link found under ``MAP_LINK_KEYS``."""
    for key in MAP_LINK_KEYS:
        value = place.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class Place(BaseModel):
    """A venue or route entry. Unknown attributes are kept for link lookup."""

    model_config = ConfigDict(extra="allow", frozen=True, coerce_numbers_to_str=True)

    name: str | None = None

    @property
    def display_name(self) -> str:
        return (self.name or "").strip() or "Unnamed"

    @property
    def map_link(self) -> str | None:
        return resolve_map_link(self.model_dump())


class Payload(BaseModel):
    """A playlist submission as pushed by the frontend."""

    model_config = ConfigDict(
        populate_by_name=True, frozen=True, extra="ignore", coerce_numbers_to_str=True
    )

    title: str | None = None
    description: str | None = None
    city: str | None = None
    travel_type: str | None = Field(default=None, alias="travelType")
    image_url: str | None = Field(default=None, alias="imageUrl")
    page_url: str | None = Field(default=None, alias="pageUrl")
    related_venues: tuple[Place, ...] = Field(default=(), alias="relatedVenues")
    related_routes: tuple[Place, ...] = Field(default=(), alias="relatedRoutes")

    @field_validator("related_venues", "related_routes", mode="before")
    @classmethod
    def _coerce_places(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, list | tuple):
            return tuple({"name": v} if isinstance(v, str) else v for v in value)
        return value

    @field_validator("title", "description", "city", "travel_type", "image_url", "page_url")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()
