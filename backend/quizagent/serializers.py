"""
Response serializers — QuizResult → JSON-able dict。

只负责「输出格式化」，不做任何解析或校验。
输入解析和校验在 quizagent/intake/ adapter。
"""

from django.conf import settings
from django.utils import timezone


def serialize_quiz_response(result):
    """Serialize a QuizResult into the 200 response envelope."""
    return {
        'agent': getattr(settings, 'QUIZ_AGENT_TAG', 'AI-Quiz-Agent-v1'),
        'summary': result.summary.summary_text,
        'structured_summary': result.summary.structured_summary,
        'validation_status': result.validation_status.to_dict(),
        'timestamp': timezone.now().isoformat(),
    }
