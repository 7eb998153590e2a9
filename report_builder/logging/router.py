# report_builder/logging/router.py
"""API router for the request log."""

from fastapi import APIRouter, Depends, Query, Response, HTTPException
from typing import List, Optional

from report_builder.core.dependencies import SessionDep
from report_builder.logging.dao import LogDAO
from report_builder.logging.schemas import LogRead
from report_builder.logging.service import LogService


router = APIRouter(
    prefix="/logs",
    tags=["logs"],
)


def get_log_service(session: SessionDep) -> LogService:
    return LogService(LogDAO(session))


@router.get("/", response_model=List[LogRead])
def get_logs(
    response: Response,
    limit: int = Query(50, ge=1, le=1000, description="Maximum number of logs to return"),
    offset: int = Query(0, ge=0, description="Number of logs to skip"),
    hours: int = Query(24, ge=1, le=168, description="Time window in hours"),
    status_min: Optional[int] = Query(None, ge=100, le=599, description="Minimum status code"),
    status_max: Optional[int] = Query(None, ge=100, le=599, description="Maximum status code"),
    search: Optional[str] = Query(None, description="Search term for filtering logs"),
    log_service: LogService = Depends(get_log_service),
) -> List[LogRead]:
    """Get logs with pagination and filtering."""
    if status_min is not None and status_max is not None and status_min > status_max:
        raise HTTPException(status_code=400, detail="status_min cannot be greater than status_max")

    logs = log_service.get_logs_with_filters(
        limit=limit,
        offset=offset,
        hours=hours,
        status_min=status_min,
        status_max=status_max,
        search=search,
    )
    total_count = log_service.count_logs_with_filters(
        hours=hours, status_min=status_min, status_max=status_max, search=search
    )

    # Pagination headers
    response.headers["X-Total-Count"] = str(total_count)
    response.headers["X-Page-Size"] = str(limit)
    response.headers["X-Page-Offset"] = str(offset)

    return logs


@router.get("/{log_id}", response_model=LogRead)
def get_log(log_id: int, log_service: LogService = Depends(get_log_service)) -> LogRead:
    return log_service.get_log(log_id)
