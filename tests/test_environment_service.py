from datetime import datetime

import httpx
import pytest

from saad_social import configs
from saad_social.services.environment_service import EnvironmentService, condition_for_code, next_prayer

from .conftest import advisory_with

TIMINGS = {"Fajr": "04:30", "Dhuhr": "12:05", "Asr": "15:30", "Maghrib": "18:10", "Isha": "19:40"}


@pytest.mark.parametrize("code, condition", [
    (0, "Clear"), (1, "Partly Cloudy"), (3, "Partly Cloudy"), (45, "Foggy"), (48, "Foggy"),
    (51, "Rain"), (67, "Rain"), (71, "Overcast"), (95, "Overcast"),
])
def test_condition_for_code(code, condition):
    assert condition_for_code(code) == condition


def test_next_prayer_and_wrap_around():
    assert next_prayer(TIMINGS, datetime(2024, 1, 1, 3, 0)) == "Fajr"
    assert next_prayer(TIMINGS, datetime(2024, 1, 1, 12, 5)) == "Asr"
    assert next_prayer(TIMINGS, datetime(2024, 1, 1, 13, 0)) == "Asr"
    assert next_prayer(TIMINGS, datetime(2024, 1, 1, 23, 0)) == "Fajr"


def widget_transport(address=None, fail=()):
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        for prefix in fail:
            if url.startswith(prefix):
                return httpx.Response(500)
        if url.startswith(configs.WEATHER_URL):
            return httpx.Response(200, json={"current_weather": {"temperature": 27.6, "weathercode": 2}})
        if url.startswith(configs.GEOCODE_URL):
            return httpx.Response(200, json={"address": address if address is not None else {"city": "Riyadh", "country": "Saudi Arabia"}})
        if url.startswith(configs.PRAYER_URL):
            return httpx.Response(200, json={"data": {"timings": dict(TIMINGS, Sunrise="05:50")}})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


async def test_dashboard_combines_widgets_and_advice():
    service = EnvironmentService(
        advisory=advisory_with(text="Stay hydrated 💧"),
        transport=widget_transport(),
        clock=lambda: datetime(2024, 1, 1, 16, 0),
    )
    dashboard = await service.load_dashboard(24.7, 46.7)

    assert dashboard.weather.temp == 28
    assert dashboard.weather.condition == "Partly Cloudy"
    assert dashboard.place.city == "Riyadh"
    assert list(dashboard.prayerTimes) == ["Fajr", "Dhuhr", "Asr", "Maghrib", "Isha"]
    assert dashboard.nextPrayer == "Maghrib"
    assert dashboard.advice == "Stay hydrated 💧"


async def test_city_falls_back_through_town_and_village():
    town = EnvironmentService(transport=widget_transport(address={"town": "Diriyah"}))
    assert (await town.reverse_geocode(1, 2)).city == "Diriyah"

    village = EnvironmentService(transport=widget_transport(address={"village": "Ushaiqer"}))
    assert (await village.reverse_geocode(1, 2)).city == "Ushaiqer"

    nowhere = EnvironmentService(transport=widget_transport(address={}))
    place = await nowhere.reverse_geocode(1, 2)
    assert place.city == "Nearby" and place.country == ""


async def test_denied_location_and_failures_degrade_widgets():
    service = EnvironmentService(transport=widget_transport())
    empty = await service.load_dashboard(None, None)
    assert empty.weather is None and empty.place is None and empty.prayerTimes is None

    broken = EnvironmentService(
        advisory=advisory_with(text="unused"),
        transport=widget_transport(fail=(configs.WEATHER_URL,)),
    )
    dashboard = await broken.load_dashboard(24.7, 46.7)
    assert dashboard.weather is None
    assert dashboard.advice is None
    assert dashboard.place.city == "Riyadh"
