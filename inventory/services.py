import logging

from django.db import transaction

from .models import VehicleInsurance

logger = logging.getLogger(__name__)


@transaction.atomic
def register_insurance(serializer) -> VehicleInsurance:
    """Save a new policy and retire whichever policy the vehicle had before."""
    vehicle = serializer.validated_data["vehicle"]
    retired = (
        VehicleInsurance.objects
        .filter(vehicle=vehicle, is_active=True)
        .update(is_active=False)
    )
    insurance = serializer.save(is_active=True)
    if retired:
        logger.info("Vehicle %s: %s previous insurance(s) deactivated", vehicle.pk, retired)
    return insurance
