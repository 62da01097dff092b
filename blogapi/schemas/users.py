from datetime import datetime
from typing import Any, Dict, Optional

from . import CamelModel


class CredentialsIn(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(CamelModel):
    id: str
    email: str
    created_at: Optional[datetime] = None


class UserWithAuthOut(UserOut):
    auth: Dict[str, Any]


class SignupOut(CamelModel):
    success: bool = True
    user: UserWithAuthOut


class SigninOut(CamelModel):
    msg: Optional[str] = None
    success: bool = True
    session: Dict[str, Any]
    user: UserWithAuthOut
