"""Response schemas for the Google Maps Platform endpoints we call.

Only the fields we map are declared; everything else is ignored. A payload
that does not fit (wrong types, missing required members) fails validation
and surfaces as an UpstreamError in the adapter.
"""
from __future__ import annotations
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict


Number = Union[int, float]


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore")


# -----------------------------
# Places API (New)
# -----------------------------
class LocalizedText(_Upstream):
    text: Optional[str] = None
    languageCode: Optional[str] = None


class LatLng(_Upstream):
    latitude: Optional[Number] = None
    longitude: Optional[Number] = None


class OpeningHours(_Upstream):
    openNow: Optional[bool] = None
    weekdayDescriptions: List[str] = []


class Place(_Upstream):
    name: Optional[str] = None
    id: Optional[str] = None
    displayName: Optional[LocalizedText] = None
    formattedAddress: Optional[str] = None
    location: Optional[LatLng] = None
    types: List[str] = []
    rating: Optional[Number] = None
    userRatingCount: Optional[int] = None
    businessStatus: Optional[str] = None
    internationalPhoneNumber: Optional[str] = None
    websiteUri: Optional[str] = None
    priceLevel: Optional[str] = None
    regularOpeningHours: Optional[OpeningHours] = None


class SearchTextResponse(_Upstream):
    places: List[Place] = []


# -----------------------------
# Weather API (current conditions)
# -----------------------------
class Degrees(_Upstream):
    degrees: Optional[Number] = None
    unit: Optional[str] = None


class TimeZone(_Upstream):
    id: Optional[str] = None


class WeatherCondition(_Upstream):
    iconBaseUri: Optional[str] = None
    description: Optional[LocalizedText] = None
    type: Optional[str] = None


class PrecipitationProbability(_Upstream):
    percent: Optional[Number] = None
    type: Optional[str] = None


class Quantity(_Upstream):
    quantity: Optional[Number] = None
    unit: Optional[str] = None


class Precipitation(_Upstream):
    probability: Optional[PrecipitationProbability] = None
    qpf: Optional[Quantity] = None


class AirPressure(_Upstream):
    meanSeaLevelMillibars: Optional[Number] = None


class WindDirection(_Upstream):
    degrees: Optional[Number] = None
    cardinal: Optional[str] = None


class WindSpeed(_Upstream):
    value: Optional[Number] = None
    unit: Optional[str] = None


class Wind(_Upstream):
    direction: Optional[WindDirection] = None
    speed: Optional[WindSpeed] = None
    gust: Optional[WindSpeed] = None


class Visibility(_Upstream):
    distance: Optional[Number] = None
    unit: Optional[str] = None


class ConditionsHistory(_Upstream):
    temperatureChange: Optional[Degrees] = None
    maxTemperature: Optional[Degrees] = None
    minTemperature: Optional[Degrees] = None
    qpf: Optional[Quantity] = None


class CurrentConditions(_Upstream):
    currentTime: Optional[str] = None
    timeZone: Optional[TimeZone] = None
    isDaytime: Optional[bool] = None
    weatherCondition: Optional[WeatherCondition] = None
    temperature: Optional[Degrees] = None
    feelsLikeTemperature: Optional[Degrees] = None
    dewPoint: Optional[Degrees] = None
    heatIndex: Optional[Degrees] = None
    windChill: Optional[Degrees] = None
    relativeHumidity: Optional[Number] = None
    uvIndex: Optional[Number] = None
    precipitation: Optional[Precipitation] = None
    thunderstormProbability: Optional[Number] = None
    airPressure: Optional[AirPressure] = None
    wind: Optional[Wind] = None
    visibility: Optional[Visibility] = None
    cloudCover: Optional[Number] = None
    currentConditionsHistory: Optional[ConditionsHistory] = None


# -----------------------------
# Elevation API
# -----------------------------
class LatLngLiteral(_Upstream):
    lat: Number
    lng: Number


class ElevationResult(_Upstream):
    elevation: Number
    resolution: Optional[Number] = None
    location: LatLngLiteral


class ElevationResponse(_Upstream):
    status: str
    results: List[ElevationResult] = []
    error_message: Optional[str] = None


# -----------------------------
# Directions API
# -----------------------------
class TextValue(_Upstream):
    text: Optional[str] = None
    value: Optional[Number] = None


class TransitLine(_Upstream):
    name: Optional[str] = None
    short_name: Optional[str] = None


class TransitStop(_Upstream):
    name: Optional[str] = None


class TransitDetails(_Upstream):
    line: Optional[TransitLine] = None
    departure_stop: Optional[TransitStop] = None
    arrival_stop: Optional[TransitStop] = None
    num_stops: Optional[int] = None


class Step(_Upstream):
    travel_mode: Optional[str] = None
    duration: Optional[TextValue] = None
    distance: Optional[TextValue] = None
    html_instructions: Optional[str] = None
    transit_details: Optional[TransitDetails] = None


class Leg(_Upstream):
    start_address: Optional[str] = None
    end_address: Optional[str] = None
    duration: Optional[TextValue] = None
    duration_in_traffic: Optional[TextValue] = None
    distance: Optional[TextValue] = None
    steps: List[Step] = []


class Route(_Upstream):
    summary: Optional[str] = None
    legs: List[Leg] = []


class DirectionsResponse(_Upstream):
    status: str
    routes: List[Route] = []
    error_message: Optional[str] = None
