import logging

from django.http import JsonResponse
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from .intake import QuizPayloadAdapter
from .serializers import serialize_quiz_response
from .services import handle_quiz

logger = logging.getLogger(__name__)


class QuizView(APIView):
    """
    POST /api/quiz/ - 生成问卷摘要并返回校验结果

    错误全部 raise，由 exception_handler.unified_exception_handler 统一格式化：
      400 缺 patient_id / 请求体不是 JSON 对象
      503 LLM 供应商容量问题
      504 LLM 超时
      500 其他
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        # 请求体按 JSON 解析，不看 Content-Type
        payload = QuizPayloadAdapter(raw_body=request.body).process()

        logger.info(
            "[Quiz] Received quiz for patient_id=%s (main_quiz=%s, order_quiz=%s, order_history=%s)",
            payload.patient_id,
            payload.main_quiz is not None,
            payload.order_quiz is not None,
            payload.order_history is not None,
        )

        result = handle_quiz(payload)
        return JsonResponse(serialize_quiz_response(result), status=200)
