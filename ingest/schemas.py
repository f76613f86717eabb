"""Canonical reading schemas, the single source of truth for data shapes across the service."""

import json
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SensorParameter(str, Enum):
    PH = "ph"
    TEMPERATURE = "temperature"
    TURBIDITY = "turbidity"
    TDS = "tds"
    GAS = "gas"


TRACKED_PARAMETERS: tuple[str, ...] = tuple(p.value for p in SensorParameter)


class TimeWindow(str, Enum):
    HOUR_1 = "1hour"
    HOURS_6 = "6hours"
    HOURS_12 = "12hours"
    HOURS_24 = "24hours"
    DAYS_7 = "7days"
    DAYS_30 = "30days"
    ALL = "all"

    @property
    def duration_ms(self) -> int | None:
        """Lookback in milliseconds, or None for the unbounded window."""
        return _WINDOW_DURATIONS_MS.get(self)

    @classmethod
    def parse(cls, value: "TimeWindow | str | None") -> "TimeWindow | None":
        """Return the matching window, or None when the value is not a known window."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


_HOUR_MS = 60 * 60 * 1000

_WINDOW_DURATIONS_MS = {
    TimeWindow.HOUR_1: _HOUR_MS,
    TimeWindow.HOURS_6: 6 * _HOUR_MS,
    TimeWindow.HOURS_12: 12 * _HOUR_MS,
    TimeWindow.HOURS_24: 24 * _HOUR_MS,
    TimeWindow.DAYS_7: 7 * 24 * _HOUR_MS,
    TimeWindow.DAYS_30: 30 * 24 * _HOUR_MS,
}


def coerce_measurement(value: Any) -> float | None:
    """
    Normalize a raw sensor value to a finite float.

    Numeric strings are accepted (sensor gateways often send them). Booleans,
    NaN/inf, unparsable strings and anything else count as absent.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_label(value: Any) -> str | None:
    """Contextual labels (breed, season) as text; numbers are stringified, containers count as absent."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value)
    return None


_CALLER_TIMESTAMP_KEYS = frozenset({"timestamp", "timestamp_ms", "timestampMillis", "iso_date", "date"})


class ReadingIn(BaseModel):
    """A sensor snapshot as delivered by the ingestion side."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    ph: float | None = None
    temperature: float | None = Field(default=None, description="Degrees Celsius")
    turbidity: float | None = Field(default=None, description="NTU")
    tds: float | None = Field(default=None, description="Total dissolved solids, ppm")
    gas: float | None = Field(default=None, description="Dissolved-gas sensor proxy")
    cattle_type: str | None = Field(default=None, alias="cattleType")
    season: str | None = None

    @field_validator("ph", "temperature", "turbidity", "tds", "gas", mode="before")
    @classmethod
    def _numeric_or_absent(cls, value: Any) -> float | None:
        return coerce_measurement(value)

    @field_validator("cattle_type", "season", mode="before")
    @classmethod
    def _label_or_absent(cls, value: Any) -> str | None:
        return coerce_label(value)

    def context_fields(self) -> dict[str, Any]:
        """
        Extra contextual keys, minus any caller-supplied timestamps, as JSON
        values. Non-JSON values are stringified; values that cannot be
        serialized at all (circular containers, non-string keys) are dropped.
        """
        extra = {}
        for key, value in (self.model_extra or {}).items():
            if key in _CALLER_TIMESTAMP_KEYS:
                continue
            try:
                extra[key] = json.loads(json.dumps(value, default=str))
            except (TypeError, ValueError):
                continue
        return extra


class StoredReading(BaseModel):
    """A reading as held in the history log. Immutable once created."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    ph: float | None = None
    temperature: float | None = None
    turbidity: float | None = None
    tds: float | None = None
    gas: float | None = None
    cattle_type: str | None = Field(default=None, alias="cattleType")
    season: str | None = None
    timestamp_ms: float = Field(description="Unix epoch in milliseconds, assigned at ingestion")
    iso_date: str

    @classmethod
    def stamp(cls, reading: ReadingIn, timestamp_ms: float) -> "StoredReading":
        iso_date = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()
        return cls(
            ph=reading.ph,
            temperature=reading.temperature,
            turbidity=reading.turbidity,
            tds=reading.tds,
            gas=reading.gas,
            cattle_type=reading.cattle_type,
            season=reading.season,
            timestamp_ms=timestamp_ms,
            iso_date=iso_date,
            **reading.context_fields(),
        )

    def value_of(self, parameter: str) -> float | None:
        """Numeric value of a parameter, or None when missing or non-numeric."""
        return coerce_measurement(getattr(self, parameter, None))
