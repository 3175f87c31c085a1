import logging
from datetime import timedelta
from typing import Any, Dict

from django.conf import settings
from django.core import signing
from django.utils import timezone
from rest_framework import authentication, exceptions

from .models import Branch

logger = logging.getLogger(__name__)

TOKEN_SALT = "branches.portal-token"
AUTH_REQUIRED = "인증이 필요합니다."


class BranchPrincipal:
    """``request.user`` for requests made with a branch portal token."""
    is_authenticated = True
    is_anonymous = False
    is_staff = False
    is_branch = True

    def __init__(self, branch: Branch):
        self.branch = branch
        self.pk = branch.pk

    def __str__(self):
        return f"branch:{self.branch.pk}"


def issue_branch_token(branch: Branch) -> Dict[str, Any]:
    ttl = timedelta(hours=getattr(settings, "BRANCH_TOKEN_TTL_HOURS", 24))
    expires_at = timezone.now() + ttl
    payload = {"branch_id": branch.pk, "exp": int(expires_at.timestamp())}
    return {
        "token": signing.dumps(payload, salt=TOKEN_SALT),
        "expires_at": expires_at,
    }


def read_branch_token(token: str) -> Dict[str, Any]:
    """Return the {branch_id, exp} payload, raising AuthenticationFailed if forged or expired."""
    try:
        payload = signing.loads(token, salt=TOKEN_SALT)
    except signing.BadSignature:
        logger.warning("Rejected branch token with a bad signature")
        raise exceptions.AuthenticationFailed(AUTH_REQUIRED)

    exp = payload.get("exp") if isinstance(payload, dict) else None
    if not isinstance(exp, int) or exp < int(timezone.now().timestamp()):
        raise exceptions.AuthenticationFailed(AUTH_REQUIRED)
    return payload


class BranchTokenAuthentication(authentication.BaseAuthentication):
    keyword = "Bearer"

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None
        if len(header) != 2:
            raise exceptions.AuthenticationFailed(AUTH_REQUIRED)

        payload = read_branch_token(header[1].decode("utf-8", errors="ignore"))
        branch = Branch.objects.filter(pk=payload.get("branch_id"), is_active=True).first()
        if branch is None:
            raise exceptions.AuthenticationFailed(AUTH_REQUIRED)
        return BranchPrincipal(branch), payload

    def authenticate_header(self, request):
        return self.keyword
