from pydantic import BaseModel


class Member(BaseModel):
    """Schema for a member directory entry."""
    id: str
    name: str
    email: str | None = None
    avatar: str | None = None
