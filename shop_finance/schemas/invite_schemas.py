from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class InviteRequest(BaseModel):
    """Body of the invite function"""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    email: str = Field(..., min_length=1, max_length=320)
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=255)
    # Accepted for compatibility with the invite form; never stored or logged
    password: Optional[str] = Field(None, repr=False, exclude=True)
    # Untrusted; coerced with Role.parse (default viewer)
    role: Optional[Any] = None


class InviteResult(BaseModel):
    """Successful invite response"""

    ok: bool = True
    user_id: str
