"""Group and member schemas"""

from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def new_id() -> str:
    """Opaque unique token for members, entries and items"""
    return str(uuid4())


class MemberBase(BaseModel):
    """Member fields shared by input and stored shapes"""

    name: str = Field(..., min_length=1, max_length=100)

    # Payout account metadata, not used by the ledger
    bank_name: Optional[str] = Field(default=None, max_length=100)
    account_name: Optional[str] = Field(default=None, max_length=255)
    account_no: Optional[str] = Field(default=None, max_length=64)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Names are compared and stored without surrounding whitespace"""
        v = v.strip()
        if not v:
            raise ValueError("Member name cannot be blank")
        return v


class Member(MemberBase):
    """Group member"""

    id: str = Field(default_factory=new_id)


class MemberCreate(MemberBase):
    """Schema for adding a member"""


class MemberUpdate(BaseModel):
    """Schema for renaming a member or editing payout metadata"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    bank_name: Optional[str] = Field(default=None, max_length=100)
    account_name: Optional[str] = Field(default=None, max_length=255)
    account_no: Optional[str] = Field(default=None, max_length=64)


class Group(BaseModel):
    """The expense group; member order is display order only"""

    id: str
    name: str
    currency: str
    members: List[Member] = Field(default_factory=list)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    def get_member(self, member_id: str) -> Optional[Member]:
        return next((m for m in self.members if m.id == member_id), None)

    def has_member(self, member_id: str) -> bool:
        return self.get_member(member_id) is not None

    def find_by_name(self, name: str) -> Optional[Member]:
        """Case-insensitive lookup"""
        key = name.strip().lower()
        return next((m for m in self.members if m.name.lower() == key), None)


class GroupUpdate(BaseModel):
    """Schema for updating group settings"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    currency: Optional[str] = Field(default=None, min_length=1, max_length=8)
