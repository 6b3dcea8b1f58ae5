from __future__ import annotations
from typing import Literal
from urllib.parse import quote
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from gateway.auth_deps import require_admin
from gateway.deps import get_workflow
from gateway.responses import envelope
from gateway.schemas.submission import ConditionsRequest, RejectRequest, StatusFilter
from gateway.services.workflow import FileDownload, SubmissionWorkflow

router = APIRouter(prefix="/admin/submissions", tags=["admin"], dependencies=[Depends(require_admin)])

@router.get("")
async def list_submissions(
    status: StatusFilter = Query(default="all"),
    q: str | None = Query(default=None, max_length=200, description="Search title, name and email"),
    order: Literal["desc", "asc"] = Query(default="desc", description="By submission time"),
    workflow: SubmissionWorkflow = Depends(get_workflow),
):
    return envelope(await workflow.list(status=status, search=q, order=order))

@router.get("/{submission_id}")
async def get_submission(submission_id: str, workflow: SubmissionWorkflow = Depends(get_workflow)):
    return envelope(await workflow.get(submission_id))

@router.get("/{submission_id}/files/{index}")
async def download_file(submission_id: str, index: int, workflow: SubmissionWorkflow = Depends(get_workflow)):
    result = await workflow.read_file(submission_id, index)
    if not isinstance(result, FileDownload):
        return envelope(result)
    return Response(
        content=result.data,
        media_type=result.type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(result.name)}"},
    )

@router.delete("/{submission_id}")
async def delete_submission(submission_id: str, workflow: SubmissionWorkflow = Depends(get_workflow)):
    return envelope(await workflow.delete(submission_id))

@router.post("/{submission_id}/accept")
async def accept_submission(submission_id: str, workflow: SubmissionWorkflow = Depends(get_workflow)):
    return envelope(await workflow.accept(submission_id))

@router.post("/{submission_id}/accept-with-conditions")
async def accept_submission_with_conditions(
    submission_id: str, payload: ConditionsRequest, workflow: SubmissionWorkflow = Depends(get_workflow)
):
    return envelope(await workflow.accept_with_conditions(submission_id, payload.conditions))

@router.post("/{submission_id}/reject")
async def reject_submission(submission_id: str, payload: RejectRequest, workflow: SubmissionWorkflow = Depends(get_workflow)):
    return envelope(await workflow.reject(submission_id, payload.reason))
