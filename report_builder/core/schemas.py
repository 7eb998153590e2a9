"""Shared response envelope and schema configuration."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base schema whose wire form is camelCase while Python attributes stay snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope used by every JSON endpoint: ``{success, message, data}``."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None


def ok(data=None, message: Optional[str] = None) -> dict:
    return {"success": True, "message": message, "data": data}
