from pydantic import BaseModel
from typing import Any, Dict, Optional


class ContestEmailRequest(BaseModel):
    emailId: str = ""


class ContestLinksRequest(BaseModel):
    driveLink: str = ""
    instagramLink: str = ""


class ContestResponse(BaseModel):
    status: str
    message: str
    step: str
    form: Dict[str, Any] = {}


class ProjectUploadResponse(BaseModel):
    status: str
    message: str
    form: Dict[str, Any] = {}
    registrationId: Optional[str] = None
    filePath: Optional[str] = None
    fileUrl: Optional[str] = None
