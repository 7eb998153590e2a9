# report_builder/logging/service.py
"""Service layer for the logging module."""

from typing import List, Optional
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from report_builder.logging.dao import LogDAO
from report_builder.logging.schemas import LogRead


class LogService:
    """Retrieves request log data."""

    def __init__(self, log_dao: LogDAO):
        self.dao = log_dao

    def get_logs_with_filters(
        self,
        limit: int = 50,
        offset: int = 0,
        hours: int = 24,
        status_min: Optional[int] = None,
        status_max: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[LogRead]:
        try:
            logs = self.dao.get_logs_with_filters(
                limit=limit,
                offset=offset,
                hours=hours,
                status_min=status_min,
                status_max=status_max,
                search=search,
            )
        except SQLAlchemyError as e:
            raise HTTPException(status_code=500, detail=f"Error fetching logs: {str(e)}") from e
        return [LogRead.model_validate(log) for log in logs]

    def count_logs_with_filters(
        self,
        hours: int = 24,
        status_min: Optional[int] = None,
        status_max: Optional[int] = None,
        search: Optional[str] = None,
    ) -> int:
        try:
            return self.dao.count_logs_with_filters(
                hours=hours, status_min=status_min, status_max=status_max, search=search
            )
        except SQLAlchemyError as e:
            raise HTTPException(status_code=500, detail=f"Error counting logs: {str(e)}") from e

    def get_log(self, log_id: int) -> LogRead:
        log = self.dao.get_by_id(log_id)
        if not log:
            raise HTTPException(status_code=404, detail="Log not found")
        return LogRead.model_validate(log)
