from pydantic import BaseModel, Field
from typing import Literal


class PresignRequest(BaseModel):
    filename: str = Field(..., min_length=1)
    content_type: str = Field(..., min_length=1)
    folder: Literal["content", "thumbnails", "questions"] = "content"


class PresignResponse(BaseModel):
    upload_url: str
    key: str
    expires_in: int
