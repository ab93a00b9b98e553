"""
请求解析与校验：view 拿到的永远是校验过的 dict。

- JSON body 解析失败 → ValidationError(INVALID_JSON)
- 字段不合法 → DRF ValidationError，由 exception_handler 转成统一格式（400）

context 字段不在这里校验：任何形状都原样交给 ClinicalContext.from_payload，
坏字段当作没传，不让整个请求失败。
"""

import json

from django.conf import settings
from rest_framework import serializers

from .catalog.types import TestType
from .exceptions import ValidationError


def _max_limit():
    return getattr(settings, "SEARCH_MAX_LIMIT", 50)


class StrictCharField(serializers.CharField):
    """CharField that refuses numbers instead of coercing them to str."""

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail("invalid")
        return super().to_internal_value(data)


class LimitMixin:

    def validate_limit(self, value):
        if value is not None and value > _max_limit():
            raise serializers.ValidationError(f"Ensure this value is less than or equal to {_max_limit()}.")
        return value


class MedicineAutocompleteRequest(LimitMixin, serializers.Serializer):
    text = StrictCharField(allow_blank=True, trim_whitespace=False, max_length=200)
    context = serializers.JSONField(required=False, allow_null=True)
    limit = serializers.IntegerField(required=False, min_value=0, allow_null=True)


class TestAutocompleteRequest(LimitMixin, serializers.Serializer):
    __test__ = False

    text = StrictCharField(allow_blank=True, trim_whitespace=False, max_length=200)
    limit = serializers.IntegerField(required=False, min_value=0, allow_null=True)


class DiagnosisSuggestionRequest(LimitMixin, serializers.Serializer):
    diagnosis = serializers.CharField(max_length=500)
    symptoms = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    context = serializers.JSONField(required=False, allow_null=True)
    limit = serializers.IntegerField(required=False, min_value=0, allow_null=True)


class CatalogQueryParams(LimitMixin, serializers.Serializer):
    """GET ?q=&category=&type=&limit=: q 必填（与 POST 不同，空 q 视为缺参）。"""

    q = serializers.CharField(max_length=200)
    category = serializers.CharField(required=False, allow_blank=True, default="")
    type = serializers.CharField(required=False, allow_blank=True, default="")
    limit = serializers.IntegerField(required=False, min_value=0, allow_null=True)

    def validate_type(self, value):
        if value and not any(value.lower() in t.value.lower() for t in TestType):
            raise serializers.ValidationError(
                f"Unknown test type. Expected one of: {', '.join(t.value for t in TestType)}."
            )
        return value


class CompletionQueryParams(LimitMixin, serializers.Serializer):
    q = serializers.CharField(max_length=200)
    catalog = serializers.ChoiceField(choices=["medicines", "tests"], required=False, default="medicines")
    limit = serializers.IntegerField(required=False, min_value=0, allow_null=True)


def parse_json_body(request) -> dict:
    try:
        data = json.loads(request.body or b"")
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError(
            message="Request body must be valid JSON.",
            code="INVALID_JSON",
        )
    if not isinstance(data, dict):
        raise ValidationError(
            message="Request body must be a JSON object.",
            code="INVALID_JSON",
        )
    return data


def validate(serializer_cls, data) -> dict:
    """Run a DRF serializer; raises rest_framework ValidationError on bad input."""
    serializer = serializer_cls(data=data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data
