from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from online_assessment.schemas.common import BaseSchema


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)


class UserSummary(BaseSchema):
    id: UUID
    email: EmailStr
    full_name: str
    is_active: bool
    roles: list[str]
    last_login_at: datetime | None
    learner_id: UUID | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'
    user: UserSummary
