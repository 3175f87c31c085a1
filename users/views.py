import logging

from django.contrib.auth import get_user_model
from rest_framework import generics, permissions, status
from rest_framework.views import APIView

from responses import failure, success
from .serializers import AdminUserCreateSerializer, MIN_PASSWORD_LENGTH, UserDetailSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


class CreateAdminUserView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, *args, **kwargs):
        email = (request.data.get("email") or "").strip()
        password = request.data.get("password") or ""
        if not email or not password:
            return failure("이메일과 비밀번호를 입력해주세요.")
        if len(password) < MIN_PASSWORD_LENGTH:
            return failure("비밀번호는 최소 6자 이상이어야 합니다.")
        if User.objects.filter(email__iexact=email).exists() or User.objects.filter(username__iexact=email).exists():
            return failure("이미 등록된 이메일입니다.", exists=True)

        serializer = AdminUserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Admin account created: user=%s by=%s", user.pk, request.user)
        return success(
            UserDetailSerializer(user).data,
            message="관리자 계정이 생성되었습니다.",
            status_code=status.HTTP_201_CREATED,
        )


# Get / update the logged-in user's profile
class MeView(generics.RetrieveUpdateAPIView):
    serializer_class = UserDetailSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user

    def retrieve(self, request, *args, **kwargs):
        return success(self.get_serializer(self.get_object()).data)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success(serializer.data, message="프로필이 수정되었습니다.")
