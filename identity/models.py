from datetime import datetime
from enum import Enum
from uuid import UUID
from pydantic import BaseModel


class Role(str, Enum):
    CUSTOMER = "customer"
    SELLER = "seller"


class Identity(BaseModel):
    id: UUID
    user_type: Role
    username: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime
