from typing import Optional
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from verisight.api.v1.deps import get_optional_user_id
from verisight.core.exceptions import DetectionServiceError
from verisight.crud.analysis import create_analysis
from verisight.db.session import get_db
from verisight.schemas.analysis import AnalysisOut, AnalyzeResponse
from verisight.schemas.detection import ContentType
from verisight.services.detection_client import DetectionClient, UploadedFile, get_detection_client

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=AnalyzeResponse)
async def analyze(
    input_type: ContentType = Form(...),
    input_content: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    save: bool = Form(True),
    user_id: Optional[str] = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
    client: DetectionClient = Depends(get_detection_client),
):
    content = (input_content or "").strip()

    upload: UploadedFile | None = None
    if file is not None and input_type in ("image", "video"):
        data = await file.read()
        if not data:
            raise HTTPException(status_code=400, detail="Empty file")
        upload = UploadedFile(
            filename=file.filename or input_type,
            content=data,
            content_type=file.content_type or "application/octet-stream",
        )
        # 저장되는 content는 파일명
        content = content or upload.filename

    if upload is None and not content:
        raise HTTPException(status_code=400, detail="input_content or file is required")

    # httpx 동기 호출이라 threadpool에서 실행
    try:
        report = await run_in_threadpool(
            client.analyze_content, input_type, content if upload is None else None, upload
        )
    except DetectionServiceError as e:
        status = 400 if e.status_code == 400 else 502
        raise HTTPException(status_code=status, detail=e.message)

    if not (save and user_id):
        return AnalyzeResponse(report=report)

    # flush/commit도 블로킹이라 threadpool에서
    row = await run_in_threadpool(create_analysis, db, user_id, input_type, content, report)
    return AnalyzeResponse(report=report, analysis=AnalysisOut.from_row(row))
