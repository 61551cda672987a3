from pydantic import BaseModel
from typing import Optional

class SessionResponse(BaseModel):
    authenticated: bool
    redirect: Optional[str] = None

class AdminPanel(BaseModel):
    slug: str
    name: str
    description: str
    link: str
