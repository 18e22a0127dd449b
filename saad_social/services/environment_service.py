import logging
from datetime import datetime
from typing import Dict, Optional

import httpx
from pydantic import BaseModel

from .. import configs
from ..errors import GeolocationDenied
from .gemini_service import AdvisoryService

logger = logging.getLogger(__name__)

PRAYER_NAMES = ("Fajr", "Dhuhr", "Asr", "Maghrib", "Isha")


class Weather(BaseModel):
    temp: int
    condition: str


class Place(BaseModel):
    city: str
    country: str = ""


class Dashboard(BaseModel):
    """Dữ liệu cho các widget ở trang cá nhân; widget nào lỗi thì để None."""
    weather: Optional[Weather] = None
    place: Optional[Place] = None
    prayerTimes: Optional[Dict[str, str]] = None
    nextPrayer: Optional[str] = None
    advice: Optional[str] = None


def condition_for_code(code: int) -> str:
    """Ánh xạ mã thời tiết WMO của Open-Meteo sang mô tả ngắn."""
    if code == 0:
        return "Clear"
    if code <= 3:
        return "Partly Cloudy"
    if 45 <= code <= 48:
        return "Foggy"
    if 51 <= code <= 67:
        return "Rain"
    return "Overcast"


def require_coordinates(lat: Optional[float], lon: Optional[float]):
    if lat is None or lon is None:
        raise GeolocationDenied("coordinates were not provided")


def next_prayer(timings: Dict[str, str], now: datetime) -> str:
    """Giờ cầu nguyện kế tiếp trong ngày; đã qua Isha thì quay về Fajr."""
    current = now.hour * 60 + now.minute
    for name in PRAYER_NAMES:
        value = timings.get(name)
        if not value:
            continue
        hours, minutes = value.split(" ")[0].split(":")[:2]
        if int(hours) * 60 + int(minutes) > current:
            return name
    return "Fajr"


class EnvironmentService:
    def __init__(self, advisory: Optional[AdvisoryService] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None, clock=None):
        self.advisory = advisory
        self._timeout = timeout or configs.HTTP_TIMEOUT
        self._transport = transport
        self._clock = clock or datetime.now

    async def _get_json(self, url: str, params: Dict) -> Dict:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.get(url, params=params, headers={"User-Agent": "saad-social"})
            response.raise_for_status()
            return response.json()

    async def get_weather(self, lat: float, lon: float) -> Weather:
        data = await self._get_json(configs.WEATHER_URL, {
            "latitude": lat,
            "longitude": lon,
            "current_weather": "true",
        })
        current = data["current_weather"]
        return Weather(temp=round(current["temperature"]), condition=condition_for_code(int(current["weathercode"])))

    async def reverse_geocode(self, lat: float, lon: float) -> Place:
        data = await self._get_json(configs.GEOCODE_URL, {"lat": lat, "lon": lon, "format": "json"})
        address = data.get("address") or {}
        city = address.get("city") or address.get("town") or address.get("village") or "Nearby"
        return Place(city=city, country=address.get("country") or "")

    async def get_prayer_times(self, lat: float, lon: float) -> Dict[str, str]:
        data = await self._get_json(configs.PRAYER_URL, {
            "latitude": lat,
            "longitude": lon,
            "method": configs.PRAYER_METHOD,
        })
        timings = data["data"]["timings"]
        return {name: timings[name] for name in PRAYER_NAMES if name in timings}

    async def load_dashboard(self, lat: Optional[float], lon: Optional[float]) -> Dashboard:
        """
        Gom các widget. Thiếu tọa độ (người dùng từ chối định vị) hoặc lỗi HTTP
        chỉ làm widget tương ứng trống, không bao giờ ném lỗi.
        """
        dashboard = Dashboard()
        try:
            require_coordinates(lat, lon)
        except GeolocationDenied as exc:
            logger.info("Dashboard without location: %s", exc.detail)
            return dashboard

        try:
            dashboard.weather = await self.get_weather(lat, lon)
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Weather widget unavailable: %s", exc)
        try:
            dashboard.place = await self.reverse_geocode(lat, lon)
        except (httpx.HTTPError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Location widget unavailable: %s", exc)
        try:
            dashboard.prayerTimes = await self.get_prayer_times(lat, lon)
            dashboard.nextPrayer = next_prayer(dashboard.prayerTimes, self._clock())
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Prayer widget unavailable: %s", exc)

        if self.advisory and dashboard.weather:
            city = dashboard.place.city if dashboard.place else "Nearby"
            dashboard.advice = await self.advisory.get_daily_advice(
                city, dashboard.weather.condition, dashboard.weather.temp
            )
        return dashboard
