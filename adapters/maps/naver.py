import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from ..registry import register
from ..base import MapsAdapter, GatewayError, GatewayNotConfigured
from .address import normalize_address

logger = logging.getLogger(__name__)


@register("maps.naver")
class NaverMapsAdapter(MapsAdapter):
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config or {})
        self.client_id = self.config.get("client_id")
        self.client_secret = self.config.get("client_secret")
        self.base = "https://naveropenapi.apigw.ntruss.com"
        self.timeout = self.config.get("timeout", 5)

    def _require_key(self, *, secret: bool = True):
        if not self.client_id or (secret and not self.client_secret):
            raise GatewayNotConfigured("네이버 지도 API 키가 설정되지 않았습니다")

    def geocode(self, *, address: str) -> Optional[Dict[str, Any]]:
        self._require_key()
        url = f"{self.base}/map-geocode/v2/geocode"
        headers = {
            "X-NCP-APIGW-API-KEY-ID": self.client_id,
            "X-NCP-APIGW-API-KEY": self.client_secret,
        }
        try:
            r = requests.get(url, params={"query": normalize_address(address) or address},
                             headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise GatewayError("지도 서버와 통신할 수 없습니다.", status_code=502, code="NETWORK_ERROR") from exc
        if not r.ok:
            logger.warning("Naver geocode for %r returned %s", address, r.status_code)
            raise GatewayError("주소 검색에 실패했습니다.", status_code=502, code=str(r.status_code))

        addresses = r.json().get("addresses") or []
        if not addresses:
            return None
        first = addresses[0]
        return {
            "lat": float(first["y"]),
            "lng": float(first["x"]),
            "address": first.get("roadAddress") or first.get("jibunAddress") or address,
            "source": "naver",
        }

    def static_map_url(self, *, lat: float, lng: float, zoom: int = 16,
                       width: int = 600, height: int = 400) -> Optional[str]:
        # Referer-restricted client id only; the secret never goes into a URL.
        self._require_key(secret=False)
        params = {
            "w": width,
            "h": height,
            "center": f"{lng},{lat}",
            "level": zoom,
            "markers": f"type:d|size:mid|pos:{lng} {lat}",
            "X-NCP-APIGW-API-KEY-ID": self.client_id,
        }
        return f"{self.base}/map-static/v2/raster-cors?{urlencode(params)}"
