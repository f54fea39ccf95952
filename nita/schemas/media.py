"""Response schemas for icon uploads."""

from pydantic import BaseModel, Field


class IconUploadResponse(BaseModel):
    filename: str = Field(..., description="Stored file name; use as a service icon")
