# adapter_google_rest.py
# - Google Maps Platform integration adapter (Places, Weather, Elevation, Directions)
# - One outbound call per method, typed response parsing, standardized error handling
# - No retries: a failed call is reported once

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from geo_mcp.config import Config
from geo_mcp.errors import UpstreamError
from geo_mcp.schemas.google import (
    CurrentConditions,
    DirectionsResponse,
    ElevationResponse,
    Place,
    SearchTextResponse,
)

logger = logging.getLogger("google")

M = TypeVar("M", bound=BaseModel)

SEARCH_FIELD_MASK = ",".join([
    "places.name",
    "places.displayName",
    "places.formattedAddress",
    "places.id",
    "places.location",
    "places.types",
    "places.rating",
    "places.userRatingCount",
    "places.businessStatus",
])

DETAILS_FIELD_MASK = ",".join([
    "id",
    "displayName",
    "formattedAddress",
    "location",
    "internationalPhoneNumber",
    "websiteUri",
    "rating",
    "userRatingCount",
    "priceLevel",
    "types",
    "regularOpeningHours",
])

_ERROR_BODY_LIMIT = 200


def _places_headers(api_key: str, field_mask: str) -> Dict[str, str]:
    """Return headers for a Places API (New) call"""
    return {
        "Content-Type": "application/json",
        "X-Goog-Api-Key": api_key,
        "X-Goog-FieldMask": field_mask,
    }


def _parse(api: str, model: Type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("%s API returned unexpected shape: %s", api, e.error_count())
        raise UpstreamError(api, "unexpected response shape", str(e)[:_ERROR_BODY_LIMIT])


class GoogleRestClient:
    """Thin async client over the Google endpoints.

    The httpx client is owned by the caller (see ``container``); this class
    never opens or closes it.
    """

    def __init__(self, http: httpx.AsyncClient, cfg: Config):
        self._http = http
        self._cfg = cfg

    async def _request(self, api: str, method: str, url: str, **kwargs: Any) -> Any:
        """Issue one request; non-2xx and transport failures become UpstreamError."""
        try:
            r = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s API transport failure: %s %s (%s)", api, method, url, type(e).__name__)
            raise UpstreamError(api, "transport", str(e)[:_ERROR_BODY_LIMIT])

        if not r.is_success:
            # params carry the key for some APIs; log the path only
            logger.warning("%s API error status=%s path=%s", api, r.status_code, r.url.path)
            raise UpstreamError(api, r.status_code, r.text[:_ERROR_BODY_LIMIT])

        try:
            return r.json()
        except ValueError:
            raise UpstreamError(api, r.status_code, "response body is not JSON")

    # -----------------------------
    # Places
    # -----------------------------
    async def search_text(self, body: Dict[str, Any]) -> SearchTextResponse:
        data = await self._request(
            "Places",
            "POST",
            f"{self._cfg.places_api_base}/places:searchText",
            json=body,
            headers=_places_headers(self._cfg.api_key, SEARCH_FIELD_MASK),
        )
        return _parse("Places", SearchTextResponse, data)

    async def place_details(self, place_id: str) -> Place:
        data = await self._request(
            "Places",
            "GET",
            f"{self._cfg.places_api_base}/places/{place_id}",
            headers=_places_headers(self._cfg.api_key, DETAILS_FIELD_MASK),
        )
        return _parse("Places", Place, data)

    # -----------------------------
    # Weather
    # -----------------------------
    async def current_conditions(self, lat: float, lng: float, units_system: str) -> CurrentConditions:
        params = {
            "key": self._cfg.api_key,
            "location.latitude": lat,
            "location.longitude": lng,
            "unitsSystem": units_system,
        }
        data = await self._request(
            "Google Weather",
            "GET",
            f"{self._cfg.weather_api_base}/currentConditions:lookup",
            params=params,
        )
        return _parse("Google Weather", CurrentConditions, data)

    # -----------------------------
    # Elevation / Directions (embedded status field)
    # -----------------------------
    async def elevation(self, locations: str) -> ElevationResponse:
        data = await self._request(
            "Elevation",
            "GET",
            f"{self._cfg.maps_api_base}/elevation/json",
            params={"locations": locations, "key": self._cfg.api_key},
        )
        resp = _parse("Elevation", ElevationResponse, data)
        if resp.status != "OK":
            raise UpstreamError("Elevation", resp.status, resp.error_message or "")
        return resp

    async def directions(
        self,
        origin: str,
        destination: str,
        mode: str,
        departure_time: Optional[str] = None,
    ) -> DirectionsResponse:
        params = {
            "origin": origin,
            "destination": destination,
            "mode": mode,
            "key": self._cfg.api_key,
        }
        if departure_time:
            params["departure_time"] = departure_time
        data = await self._request(
            "Directions",
            "GET",
            f"{self._cfg.maps_api_base}/directions/json",
            params=params,
        )
        resp = _parse("Directions", DirectionsResponse, data)
        if resp.status != "OK":
            raise UpstreamError("Directions", resp.status, resp.error_message or "")
        return resp
