from django.contrib.auth import get_user_model
from rest_framework import serializers

from branches.models import Branch

User = get_user_model()

MIN_PASSWORD_LENGTH = 6


class UserDetailSerializer(serializers.ModelSerializer):
    avatar_url = serializers.SerializerMethodField()
    branch_id = serializers.IntegerField(read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True, default=None)

    class Meta:
        model = User
        fields = (
            "id", "username", "email", "first_name", "last_name", "phone",
            "role", "branch_id", "branch_name", "is_staff", "avatar_url",
        )
        read_only_fields = ("username", "role", "is_staff")

    def get_avatar_url(self, obj):
        avatar = getattr(obj, "avatar", None)
        if not avatar:
            return None
        return getattr(avatar, "url", None)


class AdminUserCreateSerializer(serializers.Serializer):
    """Creates a staff account whose username is its email address."""
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=MIN_PASSWORD_LENGTH, error_messages={
        "min_length": "비밀번호는 최소 6자 이상이어야 합니다.",
    })
    role = serializers.ChoiceField(choices=User.Role.choices, default=User.Role.STAFF)
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.filter(is_active=True),
        source="branch",
        required=False,
        allow_null=True,
    )
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)

    def create(self, validated_data):
        password = validated_data.pop("password")
        email = validated_data.pop("email").lower()
        user = User(username=email, email=email, is_staff=True, **validated_data)
        user.set_password(password)
        user.save()
        return user
