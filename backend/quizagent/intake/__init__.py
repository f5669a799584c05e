from .adapters import QuizPayloadAdapter, build_payload
from .extractor import extract_payload_data

__all__ = ["QuizPayloadAdapter", "build_payload", "extract_payload_data"]
