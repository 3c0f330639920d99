from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from rq import Queue

from app.deps import get_queue
from app.schemas.submission import JobStatus, SubmissionOutcome

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/{job_id}", response_model=JobStatus)
async def get_job(job_id: str, queue: Queue = Depends(get_queue)):
    job = queue.fetch_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")

    status = job.get_status()
    status = getattr(status, "value", status)
    outcome = None
    if status == "finished":
        result = job.return_value()
        if result is not None:
            outcome = SubmissionOutcome.model_validate(result)
    return JobStatus(job_id=job.id, status=str(status), outcome=outcome)
