"""
统一异常体系。

所有业务异常继承 BaseAppException，包含：
- type:        错误类型标识（validation_error / service_error / service_unavailable / timeout）
- code:        业务错误码（MISSING_REQUIRED_FIELDS / SERVICE_QUOTA_EXCEEDED / ...）
- message:     人类可读的描述
- detail:      可选的附加信息（dict / list / None）
- http_status: HTTP 状态码

注意：校验核心（validation/ 与 intake/extractor.py）从不抛异常，
数据问题一律写进 ValidationStatus 的 issues。这里的异常只属于 HTTP 边界和 LLM 调用。
"""


# ── LLM 服务错误码 → 面向用户的单行提示 ────────────────────────────────────

ERROR_MESSAGES = {
    'SERVICE_QUOTA_EXCEEDED':
        'The AI service is temporarily unavailable due to high demand. Please try again in a few moments.',
    'SERVICE_PERMISSION_DENIED':
        'The AI service is currently unavailable. Please contact support if this persists.',
    'SERVICE_TEMPORARILY_UNAVAILABLE':
        'The AI service is temporarily unavailable. Please try again shortly.',
    'SERVICE_INVALID_API_KEY':
        'Service configuration error. Please contact support.',
    'SERVICE_RESOURCE_EXHAUSTED':
        'The service is experiencing high load. Please try again in a moment.',
    'SERVICE_INVALID_REQUEST':
        'Invalid request format. Please check your input and try again.',
    'SERVICE_TIMEOUT':
        'Quiz processing timed out. Please try again.',
    'SERVICE_UNKNOWN_ERROR':
        'An unexpected error occurred. Please try again later.',
}

CAPACITY_CODES = frozenset({
    'SERVICE_QUOTA_EXCEEDED',
    'SERVICE_PERMISSION_DENIED',
    'SERVICE_TEMPORARILY_UNAVAILABLE',
    'SERVICE_RESOURCE_EXHAUSTED',
})


def format_error_message(error_code, fallback_message=None):
    """已知错误码返回固定提示；否则用 fallback，再不行用通用提示。"""
    if error_code in ERROR_MESSAGES:
        return ERROR_MESSAGES[error_code]
    if fallback_message:
        return fallback_message
    return ERROR_MESSAGES['SERVICE_UNKNOWN_ERROR']


class BaseAppException(Exception):
    """所有业务异常的基类。"""

    type = 'error'
    code = 'UNKNOWN_ERROR'
    http_status = 500

    def __init__(self, message, code=None, detail=None, http_status=None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.detail = detail
        super().__init__(message)


class ValidationError(BaseAppException):
    """请求体不合法（缺 patient_id、不是 JSON 对象）。intake adapter 抛出，400。"""

    type = 'validation_error'
    code = 'VALIDATION_ERROR'
    http_status = 400


class LLMServiceError(BaseAppException):
    """
    LLM 供应商调用失败（配置错误、请求被拒、未知错误），500。

    message 统一用 ERROR_MESSAGES 里的用户提示，供应商原始错误放进 detail 方便排查。
    """

    type = 'service_error'
    code = 'SERVICE_UNKNOWN_ERROR'
    http_status = 500

    @classmethod
    def from_code(cls, code, raw_error=None):
        """按错误码选子类：容量类 → ServiceUnavailableError(503)，其余 → LLMServiceError(500)。"""
        exc_cls = ServiceUnavailableError if code in CAPACITY_CODES else LLMServiceError
        detail = {'provider_error': raw_error} if raw_error else None
        return exc_cls(message=format_error_message(code), code=code, detail=detail)


class ServiceUnavailableError(LLMServiceError):
    """LLM 供应商容量不足 / 暂时不可用，503。"""

    type = 'service_unavailable'
    http_status = 503


class GatewayTimeoutError(LLMServiceError):
    """LLM 调用超时，504。"""

    type = 'timeout'
    code = 'SERVICE_TIMEOUT'
    http_status = 504
