from typing import Any, Dict, Optional

from ..registry import register
from ..base import MapsAdapter
from .address import normalize_address


@register("maps.fake")
class FakeMapsAdapter(MapsAdapter):
    # Region keyword -> (lat, lng) of the local city hall.
    REGIONS = {
        "서울": (37.5665, 126.9780),
        "부산": (35.1796, 129.0756),
        "대구": (35.8714, 128.6014),
        "인천": (37.4563, 126.7052),
        "광주": (35.1595, 126.8526),
        "대전": (36.3504, 127.3845),
        "울산": (35.5384, 129.3114),
        "제주": (33.4996, 126.5312),
        "강릉": (37.7519, 128.8761),
    }

    def geocode(self, *, address: str) -> Optional[Dict[str, Any]]:
        normalized = normalize_address(address)
        for region, (lat, lng) in self.REGIONS.items():
            if region in normalized:
                return {"lat": lat, "lng": lng, "address": normalized, "source": "fake"}
        return None

    def static_map_url(self, *, lat: float, lng: float, zoom: int = 16,
                       width: int = 600, height: int = 400) -> Optional[str]:
        return f"https://example.com/staticmap/{lat}/{lng}/{zoom}/{width}x{height}.png"
