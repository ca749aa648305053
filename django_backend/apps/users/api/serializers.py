import re

from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = ["id", "username", "email", "name", "display_name", "role", "avatar_color", "is_staff"]
        read_only_fields = fields


class UserAdminSerializer(serializers.ModelSerializer):
    """Team management by staff: create, edit and (de)activate accounts."""

    name = serializers.ReadOnlyField()
    password = serializers.CharField(write_only=True, required=False, min_length=4)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "name",
            "display_name",
            "role",
            "avatar_color",
            "is_staff",
            "is_active",
            "password",
            "date_joined",
        ]
        read_only_fields = ["id", "date_joined"]
        extra_kwargs = {"role": {"required": True, "allow_blank": False}}

    def validate_email(self, value):
        value = value.strip().lower()
        if not value:
            return value
        clash = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate_avatar_color(self, value):
        if not re.fullmatch(r"#[0-9a-fA-F]{6}", value):
            raise serializers.ValidationError("Use a hex color such as #6366f1.")
        return value

    def create(self, validated_data):
        password = validated_data.pop("password", None)
        user = User(**validated_data)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact representation embedded in tasks, projects and activity."""

    name = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = ["id", "name", "role", "avatar_color"]
        read_only_fields = fields
