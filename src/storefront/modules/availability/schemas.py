"""Availability response schemas."""

from pydantic import BaseModel


class WindowOut(BaseModel):
    start: str
    end: str


class AvailabilityResponse(BaseModel):
    """Open windows of one date, as ``HH:MM`` strings."""

    date: str
    windows: list[WindowOut]
