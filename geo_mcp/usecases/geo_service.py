import logging
import re
from typing import Any, Dict, List, Optional

from geo_mcp.adapter_google_rest import GoogleRestClient
from geo_mcp.errors import InvalidArguments, UpstreamError
from geo_mcp.schemas.google import CurrentConditions, Place, Step

logger = logging.getLogger("tools")

MAX_SEARCH_RADIUS = 50000
DEFAULT_SEARCH_RADIUS = 5000
MAX_SEARCH_RESULTS = 10
PLACE_RESOURCE_PREFIX = "places/"

_TAG_RE = re.compile(r"<[^>]*>")

_UNIT_SYMBOLS = {
    "IMPERIAL": {"temperature": "°F", "speed": "mph", "distance": "miles", "pressure": "mb"},
    "METRIC": {"temperature": "°C", "speed": "km/h", "distance": "km", "pressure": "mb"},
}


def normalize_place_id(place_id: str) -> str:
    """'places/ChIJ...' and 'ChIJ...' both resolve to the bare id."""
    if place_id.startswith(PLACE_RESOURCE_PREFIX):
        return place_id[len(PLACE_RESOURCE_PREFIX):]
    return place_id


def units_system(units: str) -> str:
    return "IMPERIAL" if units == "imperial" else "METRIC"


def join_locations(locations: List[Dict[str, Any]]) -> str:
    return "|".join(f"{loc['lat']},{loc['lng']}" for loc in locations)


def format_directions_location(loc: Dict[str, Any]) -> str:
    if loc.get("place_id"):
        return f"place_id:{loc['place_id']}"
    if loc.get("lat") is not None and loc.get("lng") is not None:
        return f"{loc['lat']},{loc['lng']}"
    raise InvalidArguments("Location must have place_id or lat/lng")


def strip_html(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return _TAG_RE.sub("", text)


def _latlng(place: Place) -> Dict[str, Any]:
    loc = place.location
    return {
        "lat": loc.latitude if loc else None,
        "lng": loc.longitude if loc else None,
    }


def _display_name(place: Place) -> str:
    return (place.displayName.text if place.displayName else None) or "Unknown"


def _project_place(place: Place) -> Dict[str, Any]:
    """Project search-result fields"""
    return {
        "name": _display_name(place),
        "address": place.formattedAddress or "No address",
        "place_id": place.id,
        "resource_name": place.name or f"{PLACE_RESOURCE_PREFIX}{place.id}",
        "location": _latlng(place),
        "types": place.types,
        "rating": place.rating,
        "user_ratings_total": place.userRatingCount,
        "business_status": place.businessStatus,
    }


def _project_details(place: Place) -> Dict[str, Any]:
    hours = place.regularOpeningHours
    return {
        "name": _display_name(place),
        "address": place.formattedAddress or "No address",
        "place_id": place.id,
        "location": _latlng(place),
        "phone": place.internationalPhoneNumber,
        "website": place.websiteUri,
        "rating": place.rating,
        "user_ratings_total": place.userRatingCount,
        "price_level": place.priceLevel,
        "types": place.types,
        "opening_hours": {
            "open_now": hours.openNow,
            "weekday_text": hours.weekdayDescriptions,
        } if hours else None,
    }


def _deg(d) -> Optional[float]:
    return d.degrees if d else None


def _project_conditions(w: CurrentConditions, system: str) -> Dict[str, Any]:
    cond = w.weatherCondition
    precip = w.precipitation
    prob = precip.probability if precip else None
    wind = w.wind
    hist = w.currentConditionsHistory
    return {
        "time": w.currentTime,
        "timezone": w.timeZone.id if w.timeZone else None,
        "is_daytime": w.isDaytime,
        "weather": cond.type if cond else None,
        "description": cond.description.text if cond and cond.description else None,
        "icon_url": cond.iconBaseUri if cond else None,
        "temperature": _deg(w.temperature),
        "feels_like": _deg(w.feelsLikeTemperature),
        "dew_point": _deg(w.dewPoint),
        "heat_index": _deg(w.heatIndex),
        "wind_chill": _deg(w.windChill),
        "humidity": w.relativeHumidity,
        "uv_index": w.uvIndex,
        "precipitation": {
            "probability": prob.percent if prob else None,
            "type": prob.type if prob else None,
            "amount": precip.qpf.quantity if precip and precip.qpf else None,
        },
        "thunderstorm_probability": w.thunderstormProbability,
        "air_pressure": w.airPressure.meanSeaLevelMillibars if w.airPressure else None,
        "wind": {
            "direction_degrees": wind.direction.degrees if wind and wind.direction else None,
            "direction_cardinal": wind.direction.cardinal if wind and wind.direction else None,
            "speed": wind.speed.value if wind and wind.speed else None,
            "gust": wind.gust.value if wind and wind.gust else None,
        },
        "visibility": w.visibility.distance if w.visibility else None,
        "cloud_cover": w.cloudCover,
        "history_24h": {
            "temperature_change": _deg(hist.temperatureChange) if hist else None,
            "max_temperature": _deg(hist.maxTemperature) if hist else None,
            "min_temperature": _deg(hist.minTemperature) if hist else None,
            "precipitation": hist.qpf.quantity if hist and hist.qpf else None,
        },
        "units": dict(_UNIT_SYMBOLS[system]),
    }


def _project_step(step: Step) -> Dict[str, Any]:
    s: Dict[str, Any] = {
        "mode": step.travel_mode,
        "duration": step.duration.text if step.duration else None,
        "distance": step.distance.text if step.distance else None,
        "instruction": strip_html(step.html_instructions),
    }
    td = step.transit_details
    if td:
        line = td.line
        s["transit"] = {
            "line": (line.short_name or line.name) if line else None,
            "departure_stop": td.departure_stop.name if td.departure_stop else None,
            "arrival_stop": td.arrival_stop.name if td.arrival_stop else None,
            "num_stops": td.num_stops,
        }
    return s


def _text_value(tv) -> Dict[str, Any]:
    return {"value": tv.value if tv else None, "text": tv.text if tv else None}


class GeoService:
    """One method per tool; each makes exactly one upstream call."""

    def __init__(self, client: GoogleRestClient):
        self.client = client

    async def search_places(
        self,
        query: str,
        location: Optional[Dict[str, Any]] = None,
        radius: float = DEFAULT_SEARCH_RADIUS,
    ) -> Dict[str, Any]:
        logger.debug("search_places query=%r", query)
        body: Dict[str, Any] = {"textQuery": query}
        if location and location.get("lat") is not None and location.get("lng") is not None:
            body["locationBias"] = {
                "circle": {
                    "center": {"latitude": location["lat"], "longitude": location["lng"]},
                    "radius": min(radius, MAX_SEARCH_RADIUS),
                },
            }
        data = await self.client.search_text(body)
        results = [_project_place(p) for p in data.places[:MAX_SEARCH_RESULTS]]
        return {
            "success": True,
            "query": query,
            "count": len(results),
            "results": results,
            "message": f'Found {len(results)} places for "{query}".',
        }

    async def get_place_details(self, place_id: str) -> Dict[str, Any]:
        bare = normalize_place_id(place_id)
        if not bare:
            raise InvalidArguments("place_id must not be empty")
        logger.debug("get_place_details place_id=%s", bare)
        place = await self.client.place_details(bare)
        return {"success": True, "place_id": place_id, "details": _project_details(place)}

    async def get_weather(self, location: Dict[str, Any], units: str = "metric") -> Dict[str, Any]:
        lat, lng = location["lat"], location["lng"]
        system = units_system(units)
        logger.debug("get_weather lat=%s lng=%s units=%s", lat, lng, system)
        conditions = await self.client.current_conditions(lat, lng, system)
        return {
            "success": True,
            "location": {"lat": lat, "lng": lng},
            "data": {"current": _project_conditions(conditions, system)},
        }

    async def get_elevation(self, locations: List[Dict[str, Any]]) -> Dict[str, Any]:
        logger.debug("get_elevation count=%d", len(locations))
        data = await self.client.elevation(join_locations(locations))
        results = [
            {
                "elevation": r.elevation,
                "resolution": r.resolution,
                "location": {"lat": r.location.lat, "lng": r.location.lng},
            }
            for r in data.results
        ]
        return {"success": True, "count": len(results), "results": results}

    async def get_directions(
        self,
        origin: Dict[str, Any],
        destination: Dict[str, Any],
        mode: str = "driving",
        departure_time: Optional[str] = None,
    ) -> Dict[str, Any]:
        o = format_directions_location(origin)
        d = format_directions_location(destination)
        logger.debug("get_directions origin=%s destination=%s mode=%s", o, d, mode)
        data = await self.client.directions(o, d, mode, departure_time)
        if not data.routes or not data.routes[0].legs:
            raise UpstreamError("Directions", data.status, "no route returned")
        route = data.routes[0]
        leg = route.legs[0]
        return {
            "success": True,
            "origin": leg.start_address,
            "destination": leg.end_address,
            "mode": mode,
            "duration": _text_value(leg.duration),
            "duration_in_traffic": _text_value(leg.duration_in_traffic) if leg.duration_in_traffic else None,
            "distance": _text_value(leg.distance),
            "summary": route.summary,
            "steps": [_project_step(s) for s in leg.steps],
        }
