from pydantic import BaseModel
from typing import Any, Generic, Optional, TypeVar

# Shared properties
T = TypeVar("T")


class UserToken(BaseModel):
    user_id: str
    name: Optional[str] = None
    account_type: Optional[str] = None
    status: Optional[str] = None
    exp: Optional[int] = None


class JsonOutResult(BaseModel, Generic[T]):
    data: Optional[T] = None
    status: str
    status_code: str
    message: str
    errors: Optional[Any] = None
