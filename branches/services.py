import logging
from datetime import timedelta
from typing import Any, Dict, Optional
from urllib.parse import unquote

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from adapters import get_maps_adapter
from adapters.base import GatewayError
from .models import Branch

logger = logging.getLogger(__name__)

INSURANCE_EXPIRY_WINDOW_DAYS = 30


def resolve_branch(identifier: Optional[str], queryset=None) -> Optional[Branch]:
    """
    Find the active branch a micro-site URL points at.

    Tries an exact subdomain, then an exact name, then the first branch
    (alphabetically) whose name contains the identifier.
    """
    if not identifier:
        return None
    identifier = unquote(str(identifier)).strip()
    if not identifier:
        return None

    active = queryset if queryset is not None else Branch.objects.filter(is_active=True)
    return (
        active.filter(subdomain=identifier).first()
        or active.filter(name=identifier).first()
        or active.filter(name__icontains=identifier).order_by("name").first()
    )


def geocode_address(address: str, provider: Optional[str] = None) -> Optional[Dict[str, Any]]:
    adapter = get_maps_adapter(provider or settings.MAPS_PROVIDER)
    return adapter.geocode(address=address)


def fill_coordinates(branch: Branch, *, force: bool = False) -> bool:
    """
    Geocode the branch address into lat/lng. Returns True when coordinates were saved.
    Map API failures are logged and leave the branch untouched.
    """
    if not branch.address or (branch.has_coordinates and not force):
        return False
    try:
        result = geocode_address(branch.address)
    except GatewayError as exc:
        logger.warning("Geocoding failed for branch=%s: %s", branch.pk, exc.message)
        return False
    if not result:
        logger.info("No coordinates found for branch=%s address=%r", branch.pk, branch.address)
        return False
    branch.lat, branch.lng = result["lat"], result["lng"]
    branch.save(update_fields=["lat", "lng", "updated_at"])
    return True


def static_map_url(branch: Branch) -> Optional[str]:
    if not branch.has_coordinates:
        return None
    try:
        adapter = get_maps_adapter(getattr(settings, "STATIC_MAP_PROVIDER", settings.MAPS_PROVIDER))
        return adapter.static_map_url(lat=branch.lat, lng=branch.lng)
    except GatewayError:
        return None


def branch_stats(branch: Branch, today=None) -> Dict[str, Any]:
    # Imported here: inventory/booking/payments all point back at branches.
    from booking.models import Reservation
    from inventory.models import Vehicle, VehicleInsurance
    from payments.models import Payment

    today = today or timezone.localdate()
    month_start = today.replace(day=1)

    vehicles = Vehicle.objects.filter(branch=branch, is_active=True)
    reservations = Reservation.objects.filter(branch=branch)
    revenue = (
        Payment.objects.filter(branch=branch, status=Payment.Status.COMPLETED, paid_at__date__gte=month_start)
        .aggregate(total=Sum("amount"))["total"]
    )
    expiring = VehicleInsurance.objects.filter(
        branch=branch,
        is_active=True,
        end_date__gte=today,
        end_date__lte=today + timedelta(days=INSURANCE_EXPIRY_WINDOW_DAYS),
    )
    return {
        "totalVehicles": vehicles.count(),
        "availableVehicles": vehicles.filter(status=Vehicle.Status.AVAILABLE).count(),
        "pendingReservations": reservations.filter(status=Reservation.Status.PENDING).count(),
        "todayReservations": reservations.filter(start_date=today).exclude(
            status=Reservation.Status.CANCELLED
        ).count(),
        "monthlyRevenue": revenue or 0,
        "expiringInsurances": expiring.count(),
    }
