import logging

from .models import Review

logger = logging.getLogger(__name__)

# action -> field updates
MODERATION_ACTIONS = {
    "approve": {"is_approved": True},
    "hide": {"is_visible": False},
    "show": {"is_visible": True},
}


class ReviewActionError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def public_reviews(branch=None):
    qs = Review.objects.filter(is_approved=True, is_visible=True)
    if branch is not None:
        qs = qs.filter(branch=branch)
    return qs


def moderate_review(review: Review, action: str) -> Review:
    changes = MODERATION_ACTIONS.get((action or "").lower())
    if changes is None:
        raise ReviewActionError("잘못된 액션입니다.")
    for field, value in changes.items():
        setattr(review, field, value)
    review.save(update_fields=[*changes, "updated_at"])
    logger.info("Review %s moderated: %s", review.pk, action)
    return review
