# stockpos/schemas/validation.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class ValidationOut(BaseModel):
    id: int
    target_type: str
    target_id: int
    action: str
    status: str
    prior_status: Optional[str] = None
    requested_by: int
    requester_email: Optional[str] = None
    requested_at: Optional[datetime] = None
    resolved_by: Optional[int] = None
    resolver_email: Optional[str] = None
    resolved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ValidationPage(BaseModel):
    items: List[ValidationOut]
    total: int
    page: int
    page_size: int


# Answer to a delete click: done directly, or turned into a request
class DeletionResult(BaseModel):
    mode: Literal["direct", "request"]
    target_type: str
    target_id: int
    status: str
    validation: Optional[ValidationOut] = None

    @classmethod
    def from_outcome(cls, entity_type, entity_id, outcome):
        return cls(
            mode=outcome.mode,
            target_type=getattr(entity_type, "value", entity_type),
            target_id=entity_id,
            status=outcome.entity.status,
            validation=ValidationOut.model_validate(outcome.validation) if outcome.validation else None,
        )


# Answer to an explicit request-deletion / request-restoration call
class RequestResult(BaseModel):
    target_type: str
    target_id: int
    status: str
    validation: ValidationOut
