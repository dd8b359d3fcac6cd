"""Request and response models for the auth endpoints."""
from datetime import date
from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from errors import PayloadTypeMismatch, UnsupportedRole, ValidationError
from identity.models import Role

E164_PATTERN = r'^\+[1-9]\d{1,14}$'


class OptionalFieldsModel(BaseModel):
    """Request body whose empty string fields count as omitted."""

    @model_validator(mode='before')
    @classmethod
    def drop_blank_strings(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value != ''}
        return data


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8)
    user_type: Role


class LoginRequest(OptionalFieldsModel):
    username: Optional[str] = Field(default=None, min_length=3)
    email: Optional[EmailStr] = None
    password: str = Field(min_length=1)
    user_type: Role


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class UpdateAuthRequest(OptionalFieldsModel):
    refresh_token: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    username: Optional[str] = Field(default=None, min_length=3, max_length=50)
    old_password: Optional[str] = None
    new_password: Optional[str] = Field(default=None, min_length=8)


class CustomerProfileFields(OptionalFieldsModel):
    """Profile fields a customer may change. Omitted fields are left untouched."""
    model_config = ConfigDict(extra='forbid')

    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone: Optional[str] = Field(default=None, pattern=E164_PATTERN)
    address: Optional[str] = None
    date_birth: Optional[date] = None


class SellerProfileFields(OptionalFieldsModel):
    """Profile fields a seller may change. Omitted fields are left untouched."""
    model_config = ConfigDict(extra='forbid')

    company_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    rating: Optional[float] = Field(default=None, ge=0, le=5)


ProfileFields = Union[CustomerProfileFields, SellerProfileFields]

# Closed mapping of role to the only payload it accepts
PROFILE_PAYLOADS: Dict[Role, Type[BaseModel]] = {
    Role.CUSTOMER: CustomerProfileFields,
    Role.SELLER: SellerProfileFields,
}


def parse_profile_payload(role: Role, body: Dict[str, Any]) -> ProfileFields:
    """Parse a profile update body with the model of the caller's role.

    Raises:
        UnsupportedRole: If the role has no profile payload
        PayloadTypeMismatch: If the body only fits another role's payload
        ValidationError: If the body fails validation
    """
    model = PROFILE_PAYLOADS.get(role)
    if model is None:
        raise UnsupportedRole()

    try:
        return model.model_validate(body)
    except PydanticValidationError as e:
        for other_role, other_model in PROFILE_PAYLOADS.items():
            if other_role == role:
                continue
            try:
                other_model.model_validate(body)
            except PydanticValidationError:
                continue
            raise PayloadTypeMismatch(cause=e)
        raise ValidationError("invalid profile payload", e)
