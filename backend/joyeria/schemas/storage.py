from pydantic import BaseModel


class UploadResponse(BaseModel):
    bucket: str
    path: str
    public_url: str
