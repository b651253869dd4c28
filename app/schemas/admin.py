from typing import Optional
from pydantic import BaseModel


class AdminLogin(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class Token(BaseModel):
    token: str
    username: str
