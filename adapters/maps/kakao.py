import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..registry import register
from ..base import MapsAdapter, GatewayError, GatewayNotConfigured
from .address import normalize_address

logger = logging.getLogger(__name__)


@register("maps.kakao")
class KakaoMapsAdapter(MapsAdapter):
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config or {})
        self.api_key = self.config.get("api_key")
        self.base = "https://dapi.kakao.com/v2/local/search"
        self.timeout = self.config.get("timeout", 5)

    def _require_key(self):
        if not self.api_key:
            raise GatewayNotConfigured("카카오 API 키가 설정되지 않았습니다")

    def _search(self, kind: str, query: str) -> Optional[Dict[str, Any]]:
        url = f"{self.base}/{kind}.json"
        try:
            r = requests.get(
                url,
                params={"query": query},
                headers={"Authorization": f"KakaoAK {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise GatewayError("지도 서버와 통신할 수 없습니다.", status_code=502, code="NETWORK_ERROR") from exc
        if not r.ok:
            logger.warning("Kakao %s search for %r returned %s", kind, query, r.status_code)
            raise GatewayError("주소 검색에 실패했습니다.", status_code=502, code=str(r.status_code))
        documents = r.json().get("documents") or []
        return documents[0] if documents else None

    def _attempts(self, address: str) -> List[Tuple[str, str]]:
        normalized = normalize_address(address)
        attempts = [("address", address)]
        if normalized and normalized != address:
            attempts.append(("address", normalized))
        attempts.append(("keyword", normalized or address))
        return attempts

    def geocode(self, *, address: str) -> Optional[Dict[str, Any]]:
        self._require_key()
        for kind, query in self._attempts(address):
            doc = self._search(kind, query)
            if doc:
                # Kakao returns x = longitude, y = latitude as strings.
                return {
                    "lat": float(doc["y"]),
                    "lng": float(doc["x"]),
                    "address": doc.get("address_name") or doc.get("place_name") or query,
                    "source": kind,
                }
        logger.info("Kakao found no match for address %r", address)
        return None
