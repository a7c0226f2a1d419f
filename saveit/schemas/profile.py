from pydantic import BaseModel
from typing import Optional


class ProfileResponse(BaseModel):
    id: str
    username: str
    email: Optional[str] = None

    class Config:
        from_attributes = True
