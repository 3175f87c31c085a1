from importlib import import_module
import logging
from typing import Any, Dict, List

from django.conf import settings

from .registry import get as _get_cls, all_names as _all_names
from .base import PaymentAdapter, MapsAdapter

logger = logging.getLogger(__name__)

_MODULES = (
    # Payments
    "adapters.payments.toss",
    "adapters.payments.fake",
    # Maps
    "adapters.maps.kakao",
    "adapters.maps.naver",
    "adapters.maps.fake",
)

for _m in _MODULES:
    try:
        import_module(_m)
    except ImportError as exc:
        logger.warning("Could not import adapter module %s: %s", _m, exc)


def _cfg(name: str) -> Dict[str, Any]:
    return getattr(settings, "ADAPTERS_CONFIG", {}).get(name.lower(), {})


# --- Payment ---
def get_payment_adapter(name: str) -> PaymentAdapter:
    return _get_cls(f"payments.{name}")(_cfg(f"payments.{name}"))


# --- Maps ---
def get_maps_adapter(name: str) -> MapsAdapter:
    return _get_cls(f"maps.{name}")(_cfg(f"maps.{name}"))


def available_adapters() -> List[str]:
    return _all_names()
