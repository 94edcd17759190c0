from rest_framework import serializers
from .models import User, Role


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=1, write_only=True, trim_whitespace=False)


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True, trim_whitespace=False)
    role = serializers.ChoiceField(choices=Role.choices, default=Role.CUSTOMER)
    avatar_url = serializers.URLField(required=False, allow_blank=True)


class UserSerializer(serializers.ModelSerializer):
    """
    Public view of a user. The password hash never leaves the server.
    """

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'avatar_url', 'created_at', 'updated_at']
        read_only_fields = fields


class UserWriteSerializer(serializers.ModelSerializer):
    """
    Admin create / partial update. Password is hashed, email must stay unique.
    """
    password = serializers.CharField(min_length=6, write_only=True, required=False, trim_whitespace=False)
    name = serializers.CharField(min_length=2, max_length=255, required=False)
    avatar_url = serializers.URLField(required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'password', 'role', 'avatar_url']
        read_only_fields = ['id']
        extra_kwargs = {"email": {"validators": []}}

    def validate_email(self, value):
        qs = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            if self.instance is None:
                raise serializers.ValidationError("User with this email already exists")
            raise serializers.ValidationError("Email already taken by another user")
        return value

    def validate(self, attrs):
        if self.instance is None:
            missing = [f for f in ("name", "password") if not attrs.get(f)]
            if missing:
                raise serializers.ValidationError({f: "This field is required." for f in missing})
        elif not attrs:
            raise serializers.ValidationError("No fields to update")
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        validated_data["avatar_url"] = validated_data.get("avatar_url") or None
        return User.objects.create_user(password=password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        if "avatar_url" in validated_data:
            validated_data["avatar_url"] = validated_data["avatar_url"] or None
        for field, value in validated_data.items():
            setattr(instance, field, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance
