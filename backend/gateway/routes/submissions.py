from __future__ import annotations
from fastapi import APIRouter, Depends, File, Form, UploadFile
from gateway.deps import get_workflow
from gateway.responses import envelope
from gateway.services.validation import IncomingFile
from gateway.services.workflow import SubmissionWorkflow

router = APIRouter(prefix="/submissions", tags=["submissions"])

async def read_upload(upload: UploadFile, limit: int) -> IncomingFile:
    # Read one byte past the ceiling so oversize files still fail validation without buffering them whole
    data = await upload.read(limit + 1)
    return IncomingFile(
        name=upload.filename or "file",
        type=upload.content_type or "application/octet-stream",
        data=data,
    )

@router.post("", status_code=201)
async def submit_project(
    name: str = Form(""),
    email: str = Form(""),
    phone: str | None = Form(None),
    project_title: str = Form("", alias="projectTitle"),
    project_description: str = Form("", alias="projectDescription"),
    files: list[UploadFile] | None = File(default=None),
    workflow: SubmissionWorkflow = Depends(get_workflow),
):
    limit = workflow.limits.max_file_bytes
    uploads = [await read_upload(f, limit) for f in (files or [])]
    result = await workflow.submit(
        {
            "name": name,
            "email": email,
            "phone": phone,
            "projectTitle": project_title,
            "projectDescription": project_description,
        },
        uploads,
    )
    # the public caller only gets the id back, never the stored record
    return envelope(result.model_copy(update={"submission": None}), success_status=201)
