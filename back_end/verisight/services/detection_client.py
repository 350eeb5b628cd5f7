from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, BinaryIO, Optional

import httpx
from pydantic import ValidationError

from verisight.core.config import settings
from verisight.core.exceptions import DetectionServiceError
from verisight.schemas.detection import DetectionReport

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/analyze-content"
DEFAULT_ERROR_MESSAGE = "Failed to analyze content"


@dataclass
class UploadedFile:
    filename: str
    content: bytes | BinaryIO
    content_type: str = "application/octet-stream"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return DEFAULT_ERROR_MESSAGE
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return DEFAULT_ERROR_MESSAGE


def unwrap_raw_response(body: Any) -> Any:
    """
    판별 API는 결과를 {"raw_response": "<json 문자열>"} 로 감싸서 주기도 하고
    그냥 JSON으로 주기도 함. 감싸져 있으면 풀고, 파싱 실패하면 원본 그대로 사용.
    """
    if not isinstance(body, dict):
        return body
    raw = body.get("raw_response")
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except ValueError:
            return body
    return body


class DetectionClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.DETECTION_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.DETECTION_API_TIMEOUT_SEC
        self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def analyze_content(
        self,
        input_type: str,
        input_content: Optional[str] = None,
        file: Optional[UploadedFile] = None,
    ) -> DetectionReport:
        # 이미지/영상 파일은 타입 이름으로 파일 필드만 보냄, 나머지는 input_type + input_content
        # 텍스트도 multipart로 보내야 해서 filename 없는 필드로 넣음
        if input_type in ("image", "video") and file is not None:
            files = {input_type: (file.filename, file.content, file.content_type)}
        else:
            if not input_content:
                raise DetectionServiceError("input_content is required", status_code=400)
            files = {
                "input_type": (None, input_type.encode("utf-8")),
                "input_content": (None, input_content.encode("utf-8")),
            }

        try:
            response = self._client.post(ANALYZE_PATH, files=files)
        except httpx.HTTPError as e:
            logger.exception("detection API request failed: %s", type(e).__name__)
            raise DetectionServiceError(DEFAULT_ERROR_MESSAGE) from e

        if response.is_error:
            message = _error_message(response)
            logger.warning("detection API returned %s: %s", response.status_code, message)
            raise DetectionServiceError(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise DetectionServiceError("Detection service returned invalid JSON") from e

        payload = unwrap_raw_response(body)
        if not isinstance(payload, dict):
            raise DetectionServiceError("Detection service returned an unexpected payload")

        try:
            report = DetectionReport.model_validate(payload)
        except ValidationError as e:
            logger.warning("detection report rejected: %s", e.errors()[:3])
            raise DetectionServiceError("Detection service returned an unexpected payload") from e

        logger.info(
            "detection done type=%s verdict=%s confidence=%.1f",
            input_type, report.verdict, report.confidence_score,
        )
        return report


_client: DetectionClient | None = None
_client_lock = threading.Lock()


# FastAPI Dependency (테스트에서는 dependency_overrides로 교체)
# sync dependency라 threadpool 여러 스레드에서 동시에 불릴 수 있음
def get_detection_client() -> DetectionClient:
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                _client = DetectionClient()
    return _client


def close_detection_client() -> None:
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None
