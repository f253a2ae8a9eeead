"""Entity types exchanged with the authorization-server engine.

Rows are validated straight from the ORM objects (from_attributes), so the
field names follow the column names. created_at and updated_at are always
assigned by the store; values supplied by the caller are ignored on write.
"""
from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ClientType = Literal["confidential", "public"]


class StoreModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class OAuthClient(StoreModel):
    id: str
    secret: Optional[str] = None
    name: str
    type: ClientType
    redirect_uris: List[str] = Field(default_factory=list)
    scopes: List[str] = Field(default_factory=list)
    grant_types: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OAuthUser(StoreModel):
    id: str
    username: str
    email: str
    hashed_password: str
    scopes: List[str] = Field(default_factory=list)
    profile: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthorizationCode(StoreModel):
    code: str
    client_id: str
    user_id: str
    redirect_uri: str
    scope: str
    resource: Optional[str] = None
    code_challenge: Optional[str] = None
    code_challenge_method: Optional[str] = None
    expires_at: datetime
    created_at: Optional[datetime] = None

    @field_validator("expires_at")
    @classmethod
    def require_timezone(cls, v: datetime) -> datetime:
        return _require_aware(v)


class AccessToken(StoreModel):
    token: str
    client_id: str
    user_id: str
    scope: str
    expires_at: datetime
    created_at: Optional[datetime] = None

    @field_validator("expires_at")
    @classmethod
    def require_timezone(cls, v: datetime) -> datetime:
        return _require_aware(v)


class RefreshToken(StoreModel):
    token: str
    access_token_id: str
    client_id: str
    user_id: str
    scope: str
    expires_at: datetime
    created_at: Optional[datetime] = None

    @field_validator("expires_at")
    @classmethod
    def require_timezone(cls, v: datetime) -> datetime:
        return _require_aware(v)


def _require_aware(v: datetime) -> datetime:
    if v.tzinfo is None or v.utcoffset() is None:
        raise ValueError("expires_at must be timezone-aware")
    return v


class PartialUpdate(BaseModel):
    """Base for partial updates.

    A field counts as present only when the caller passed it, which is what
    pydantic records in model_fields_set. Omitted fields are left untouched;
    an explicit None clears a nullable column.
    """

    model_config = ConfigDict(extra="forbid")

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_cleared_required(self):
        for field_name in self.model_fields_set:
            if getattr(self, field_name) is None and field_name not in self.nullable_fields:
                raise ValueError(f"{field_name} cannot be cleared")
        return self

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields_set}


class ClientUpdate(PartialUpdate):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"secret"})

    secret: Optional[str] = None
    name: Optional[str] = None
    type: Optional[ClientType] = None
    redirect_uris: Optional[List[str]] = None
    scopes: Optional[List[str]] = None
    grant_types: Optional[List[str]] = None


class UserUpdate(PartialUpdate):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"profile"})

    username: Optional[str] = None
    email: Optional[str] = None
    hashed_password: Optional[str] = None
    scopes: Optional[List[str]] = None
    profile: Optional[Dict[str, Any]] = None


class StorageStats(BaseModel):
    clients: int = 0
    users: int = 0
    authorization_codes: int = 0
    access_tokens: int = 0
    refresh_tokens: int = 0
