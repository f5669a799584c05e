"""
DRF EXCEPTION_HANDLER：所有错误都输出同一种 JSON。

成功响应没有 type 字段，错误响应一定有：
{
    "type":    "validation_error" | "service_error" | "service_unavailable" | "timeout" | "error",
    "code":    "MISSING_REQUIRED_FIELDS",
    "message": "Missing required fields: patient_id",
    "detail":  { ... }  // 可选
}

未预期异常只记日志，响应里不带异常文本。
"""

import logging

from django.http import JsonResponse
from rest_framework.exceptions import ParseError
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.views import exception_handler as drf_default_handler

from .exceptions import ERROR_MESSAGES, BaseAppException

logger = logging.getLogger(__name__)


def error_response(error_type, code, message, status, detail=None):
    body = {'type': error_type, 'code': code, 'message': message}
    if detail is not None:
        body['detail'] = detail
    return JsonResponse(body, status=status)


def unified_exception_handler(exc, context):
    if isinstance(exc, BaseAppException):
        return error_response(exc.type, exc.code, exc.message, exc.http_status, exc.detail)

    # 请求体解析失败也算客户端错误
    if isinstance(exc, (DRFValidationError, ParseError)):
        return error_response(
            'validation_error', 'VALIDATION_ERROR', 'Request validation failed', 400, exc.detail,
        )

    # 405 / 404 等 DRF 自己认识的异常
    response = drf_default_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view') if isinstance(context, dict) else None
    logger.exception(
        "[Quiz] Unhandled %s in %s",
        type(exc).__name__,
        type(view).__name__ if view is not None else 'unknown view',
    )
    return error_response(
        'error', 'SERVICE_UNKNOWN_ERROR', ERROR_MESSAGES['SERVICE_UNKNOWN_ERROR'], 500,
    )
