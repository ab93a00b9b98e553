"""
Error responses for the rxsearch views.

ExceptionHandlerMixin.dispatch 捕获异常后交给这里。成功响应里没有 `type` 字段，
错误响应一定有，前端只看这一个字段就能分辨。

Body:
    {"type": "not_found", "code": "MEDICATION_NOT_FOUND", "message": "...", "detail": {...}}

`detail` 只在有附加信息时出现。
"""

import logging

from django.http import JsonResponse
from rest_framework.exceptions import ValidationError as DRFValidationError

from .exceptions import BaseAppException

logger = logging.getLogger(__name__)


def unified_exception_handler(exc, context=None):
    """
    BaseAppException → its own type/code/status; DRF ValidationError from
    intake.validate → 400 validation_error. Returns None for anything else.
    """

    if isinstance(exc, BaseAppException):
        if exc.http_status >= 500:
            logger.error("[%s] %s: %s", context or 'request', exc.code, exc.message)
        body = {
            'type': exc.type,
            'code': exc.code,
            'message': exc.message,
        }
        if exc.detail is not None:
            body['detail'] = exc.detail
        return JsonResponse(body, status=exc.http_status)

    # serializer.is_valid(raise_exception=True)
    if isinstance(exc, DRFValidationError):
        body = {
            'type': 'validation_error',
            'code': 'VALIDATION_ERROR',
            'message': 'Request validation failed',
            'detail': exc.detail,
        }
        return JsonResponse(body, status=400)

    return None
