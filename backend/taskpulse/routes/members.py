"""
Member directory routes for the TaskPulse API.
"""

from fastapi import APIRouter, Depends

from taskpulse.auth import AuthenticatedUser, get_current_user
from taskpulse.schemas import Member
from taskpulse.services.members import MemberDirectory, get_member_directory

router = APIRouter()


@router.get("/", response_model=list[Member])
async def list_members(
    user: AuthenticatedUser = Depends(get_current_user),
    directory: MemberDirectory = Depends(get_member_directory),
) -> list[Member]:
    """Members that tasks can be assigned to or shared with."""
    return directory.members()
