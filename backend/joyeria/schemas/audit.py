from datetime import datetime
from typing import Any

from pydantic import BaseModel


class AuditEntry(BaseModel):
    id: str
    type: str
    action: str
    table: str
    record_id: int
    user_name: str
    user_email: str
    date: datetime | None = None
    details: dict[str, Any]
