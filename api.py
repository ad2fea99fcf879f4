# api.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from drive_folders import SHARING_STEPS
from errors import FormHouseError
from form_config import get_service_definition, list_services
from repository import get_submissions
from schemas import (
    HealthResponse,
    RechargeOptionOut,
    ServiceDetail,
    ServicesList,
    ServiceSummary,
    StoredFilesList,
    Submission,
    SubmissionsList,
    SubmitResponse,
)
from storage_base import FileUpload
from storage_drive import DriveStorage
from storage_local import LocalStorage
from submission import SubmissionHandler, SubmissionRequest

logger = logging.getLogger(__name__)

# ---------- FastAPI router ----------
router = APIRouter(prefix="/api")


def get_handler(request: Request) -> SubmissionHandler:
    return request.app.state.handler


# ===================== 1) Health + service catalog =====================
@router.get("/health", response_model=HealthResponse)
async def health(handler: SubmissionHandler = Depends(get_handler)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        message="FormHouse API is running",
        storage=handler.storage_name,
    )


@router.get("/services", response_model=ServicesList)
async def services() -> ServicesList:
    return ServicesList(
        services=[ServiceSummary(key=s.key, name=s.name) for s in list_services()]
    )


@router.get("/services/{service_key}", response_model=ServiceDetail)
async def service_detail(service_key: str) -> ServiceDetail:
    """
    Full catalog entry for one service: documents checklist for the upload
    form, or the recharge options for the recharge service.
    """
    service = get_service_definition(service_key)
    if not service:
        raise HTTPException(status_code=404, detail="Unknown service")
    return ServiceDetail(
        key=service.key,
        name=service.name,
        icon=service.icon,
        description=service.description,
        category=service.category,
        documents=list(service.documents),
        recharge_options=[RechargeOptionOut(name=o.name, icon=o.icon) for o in service.recharge_options],
    )


# ===================== 2) Submit form with files =====================
@router.post("/submit", response_model=SubmitResponse)
async def submit_form(
    service: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    handler: SubmissionHandler = Depends(get_handler),
) -> SubmitResponse:
    """
    1. Check storage is configured and the required fields / file sizes.
    2. Store every file under root/service/user (a failed file is skipped).
    3. Store one metadata JSON next to the files and index the submission.
    """
    uploads = []
    for upload in files or []:
        content = await upload.read()
        # an empty file input still sends a part with no filename
        if not upload.filename and not content:
            continue
        uploads.append(
            FileUpload(
                filename=upload.filename or "file",
                content=content,
                content_type=upload.content_type or "application/octet-stream",
            )
        )

    submission = SubmissionRequest(service=service, name=name, phone=phone, email=email, files=uploads)
    data = await run_in_threadpool(handler.submit, submission)
    return SubmitResponse(data=data)


# ===================== 3) Inspection endpoints =====================
@router.get("/files", response_model=StoredFilesList)
async def list_stored_files(handler: SubmissionHandler = Depends(get_handler)) -> StoredFilesList:
    """Files stored on local disk, per service and user (local storage only)."""
    if not isinstance(handler.storage, LocalStorage):
        raise HTTPException(status_code=404, detail="File listing is only available with local storage")
    return StoredFilesList(services=handler.storage.list_files())


@router.get("/test-folder")
async def test_folder(handler: SubmissionHandler = Depends(get_handler)):
    """Checks the Drive root folder is reachable and writable, with fix-up steps if not."""
    if handler.provider != "drive":
        raise HTTPException(status_code=404, detail="Folder test is only available with Google Drive storage")
    if handler.storage is None:
        return JSONResponse(
            status_code=503,
            content={
                "error": "Google Drive API not configured",
                "message": "Please configure credentials.json",
            },
        )

    storage: DriveStorage = handler.storage
    try:
        return await run_in_threadpool(storage.check_root)
    except FormHouseError as e:
        logger.warning("Folder test failed: %s", e.message)
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": e.message,
                "kind": e.kind,
                "serviceAccountEmail": storage.service_account_email,
                "instructions": SHARING_STEPS,
            },
        )


@router.get("/submissions", response_model=SubmissionsList)
async def list_submissions(limit: int = Query(50, ge=1, le=500)) -> SubmissionsList:
    rows = await run_in_threadpool(get_submissions, limit)
    return SubmissionsList(items=[Submission(**r) for r in rows])
