# dispatch_api/shared/schemas/common.py
from pydantic import BaseModel

class StatusResponse(BaseModel):
    status: str

class ErrorResponse(BaseModel):
    error: str
