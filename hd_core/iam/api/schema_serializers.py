# backend/hd_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers

from hd_core.iam.api.serializers import UserSerializer


class LoginRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()


class LoginDataSerializer(serializers.Serializer):
    access = serializers.CharField()
    refresh = serializers.CharField()
    user = UserSerializer(allow_null=True)


class LoginResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    data = LoginDataSerializer()


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class MeResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    data = UserSerializer()
