from __future__ import annotations

import asyncio
import copy
from typing import Any

import httpx
import pytest

from geo_mcp.config import Config
from geo_mcp.container import Container, build_container
from geo_mcp.dispatcher import Dispatcher


PLACE = {
    "name": "places/ChIJ123",
    "id": "ChIJ123",
    "displayName": {"text": "Victrola Coffee", "languageCode": "en"},
    "formattedAddress": "310 E Pike St, Seattle, WA 98122, USA",
    "location": {"latitude": 47.6141, "longitude": -122.3271},
    "types": ["cafe", "food"],
    "rating": 4.5,
    "userRatingCount": 1200,
    "businessStatus": "OPERATIONAL",
}

PLACE_DETAILS = {
    **PLACE,
    "internationalPhoneNumber": "+1 206-624-1725",
    "websiteUri": "https://victrolacoffee.com/",
    "priceLevel": "PRICE_LEVEL_INEXPENSIVE",
    "regularOpeningHours": {
        "openNow": True,
        "weekdayDescriptions": ["Monday: 7:00 AM - 6:00 PM", "Tuesday: 7:00 AM - 6:00 PM"],
    },
}

WEATHER = {
    "currentTime": "2025-01-28T22:04:12.025273178Z",
    "timeZone": {"id": "America/Los_Angeles"},
    "isDaytime": True,
    "weatherCondition": {
        "iconBaseUri": "https://maps.gstatic.com/weather/v1/cloudy",
        "description": {"text": "Cloudy", "languageCode": "en"},
        "type": "CLOUDY",
    },
    "temperature": {"degrees": 9.1, "unit": "CELSIUS"},
    "feelsLikeTemperature": {"degrees": 7.5, "unit": "CELSIUS"},
    "dewPoint": {"degrees": 3.2, "unit": "CELSIUS"},
    "heatIndex": {"degrees": 9.1, "unit": "CELSIUS"},
    "windChill": {"degrees": 7.5, "unit": "CELSIUS"},
    "relativeHumidity": 65,
    "uvIndex": 1,
    "precipitation": {
        "probability": {"percent": 10, "type": "RAIN"},
        "qpf": {"quantity": 0.2, "unit": "MILLIMETERS"},
    },
    "thunderstormProbability": 0,
    "airPressure": {"meanSeaLevelMillibars": 1019.2},
    "wind": {
        "direction": {"degrees": 200, "cardinal": "SOUTH_SOUTHWEST"},
        "speed": {"value": 11, "unit": "KILOMETERS_PER_HOUR"},
        "gust": {"value": 24, "unit": "KILOMETERS_PER_HOUR"},
    },
    "visibility": {"distance": 16, "unit": "KILOMETERS"},
    "cloudCover": 100,
    "currentConditionsHistory": {
        "temperatureChange": {"degrees": -1.2, "unit": "CELSIUS"},
        "maxTemperature": {"degrees": 11.4, "unit": "CELSIUS"},
        "minTemperature": {"degrees": 4.0, "unit": "CELSIUS"},
        "qpf": {"quantity": 1.4, "unit": "MILLIMETERS"},
    },
}

ELEVATION_OK = {
    "status": "OK",
    "results": [
        {"elevation": 56.72, "resolution": 4.77, "location": {"lat": 47.6062, "lng": -122.3321}},
    ],
}

DIRECTIONS_OK = {
    "status": "OK",
    "routes": [
        {
            "summary": "I-5 S",
            "legs": [
                {
                    "start_address": "Seattle, WA, USA",
                    "end_address": "Tacoma, WA, USA",
                    "duration": {"value": 2040, "text": "34 mins"},
                    "distance": {"value": 53000, "text": "53.0 km"},
                    "steps": [
                        {
                            "travel_mode": "DRIVING",
                            "duration": {"value": 60, "text": "1 min"},
                            "distance": {"value": 300, "text": "0.3 km"},
                            "html_instructions": "Head <b>south</b> on <div>4th Ave</div>",
                        },
                        {
                            "travel_mode": "TRANSIT",
                            "duration": {"value": 1800, "text": "30 mins"},
                            "distance": {"value": 50000, "text": "50 km"},
                            "html_instructions": "Train towards Tacoma Dome",
                            "transit_details": {
                                "line": {"name": "Sounder South Line", "short_name": "S Line"},
                                "departure_stop": {"name": "King Street Station"},
                                "arrival_stop": {"name": "Tacoma Dome Station"},
                                "num_stops": 6,
                            },
                        },
                    ],
                }
            ],
        }
    ],
}


class FakeGoogle:
    """httpx.MockTransport handler standing in for the Google endpoints.

    Routes are matched on the URL path suffix; unmatched requests get a 404.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, tuple[int, Any]] = {}

    def reply(self, path_suffix: str, body: Any, status: int = 200) -> None:
        self.routes[path_suffix] = (status, copy.deepcopy(body))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for suffix, (status, body) in self.routes.items():
            if request.url.path.endswith(suffix):
                if isinstance(body, str):
                    return httpx.Response(status, text=body)
                return httpx.Response(status, json=body)
        return httpx.Response(404, text="no route")

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def cfg() -> Config:
    return Config(api_key="test-key", sse_keepalive_sec=0.01)


@pytest.fixture
def google() -> FakeGoogle:
    fake = FakeGoogle()
    fake.reply("/places:searchText", {"places": [PLACE]})
    fake.reply("/places/ChIJ123", PLACE_DETAILS)
    fake.reply("/currentConditions:lookup", WEATHER)
    fake.reply("/elevation/json", ELEVATION_OK)
    fake.reply("/directions/json", DIRECTIONS_OK)
    return fake


@pytest.fixture
def container(cfg: Config, google: FakeGoogle) -> Container:
    return build_container(cfg, transport=httpx.MockTransport(google))


@pytest.fixture
def service(container: Container):
    return container.service


@pytest.fixture
def dispatcher(container: Container, cfg: Config) -> Dispatcher:
    return Dispatcher(container.service, container.registry, cfg)


SLOW_SEARCH_SEC = 0.3


@pytest.fixture
def slow_container(cfg: Config, google: FakeGoogle) -> Container:
    """Like ``container`` but /places:searchText answers after SLOW_SEARCH_SEC."""

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/places:searchText"):
            await asyncio.sleep(SLOW_SEARCH_SEC)
        return google(request)

    return build_container(cfg, transport=httpx.MockTransport(handler))
