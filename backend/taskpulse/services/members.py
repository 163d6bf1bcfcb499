"""
Read-only member directory.

Tasks only ever store member identifiers; this lookup exists so clients can
render names and avatars next to assignees and collaborators.
"""

import json
from functools import lru_cache
from pathlib import Path

from pydantic import TypeAdapter

from taskpulse.config import get_settings
from taskpulse.schemas.member import Member
from taskpulse.logging_config import get_logger

logger = get_logger(__name__)

_members_adapter = TypeAdapter(list[Member])


class MemberDirectory:
    """Lookup from member id to display details."""

    def __init__(self, members: list[Member] | None = None):
        self._members = {member.id: member for member in members or []}

    @classmethod
    def from_file(cls, path: str | Path) -> "MemberDirectory":
        """Load a JSON list of {id, name, email, avatar}."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        members = _members_adapter.validate_python(raw)
        logger.info(f"Loaded {len(members)} members from {path}")
        return cls(members)

    def get(self, member_id: str) -> Member | None:
        return self._members.get(member_id)

    def members(self) -> list[Member]:
        return sorted(self._members.values(), key=lambda member: member.name)


@lru_cache
def get_member_directory() -> MemberDirectory:
    """Directory configured by MEMBERS_FILE; empty when unset."""
    path = get_settings().members_file
    if not path:
        return MemberDirectory()
    return MemberDirectory.from_file(path)
