from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
