"""
Conversation Storage
Session messages and UI versions behind a small async interface.
"""

import asyncio
import time
from collections import defaultdict
from typing import Any, Literal, Protocol

from pydantic import BaseModel, Field

from uiforge.core import get_logger

logger = get_logger(__name__)

Role = Literal["user", "assistant"]


class StoredMessage(BaseModel):
    """One chat message."""
    session_id: str
    role: Role
    content: str
    created_at: float = Field(default_factory=time.time)


class UIVersion(BaseModel):
    """One generated UI version."""
    id: int
    session_id: str
    version: int
    code: str
    plan: dict[str, Any]
    explanation: str
    is_active: bool = True
    created_at: float = Field(default_factory=time.time)


class ConversationStore(Protocol):
    """Persistence collaborator used at the end of a successful run."""

    async def append_message(self, session_id: str, role: Role, content: str) -> None: ...

    async def next_version_number(self, session_id: str) -> int: ...

    async def deactivate_all_versions(self, session_id: str) -> None: ...

    async def insert_version(
        self,
        session_id: str,
        version: int,
        code: str,
        plan: dict[str, Any],
        explanation: str,
        active: bool = True,
    ) -> UIVersion: ...

    async def list_versions(self, session_id: str) -> list[UIVersion]: ...

    async def list_messages(self, session_id: str) -> list[StoredMessage]: ...

    async def activate_version(self, session_id: str, version_id: int) -> UIVersion | None: ...


class InMemoryConversationStore:
    """Process-local store; version ids are global, version numbers per session."""

    def __init__(self) -> None:
        self._messages: dict[str, list[StoredMessage]] = defaultdict(list)
        self._versions: dict[str, list[UIVersion]] = defaultdict(list)
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def append_message(self, session_id: str, role: Role, content: str) -> None:
        async with self._lock:
            self._messages[session_id].append(StoredMessage(session_id=session_id, role=role, content=content))

    async def next_version_number(self, session_id: str) -> int:
        async with self._lock:
            versions = self._versions.get(session_id, [])
            return max((v.version for v in versions), default=0) + 1

    async def deactivate_all_versions(self, session_id: str) -> None:
        async with self._lock:
            for v in self._versions.get(session_id, []):
                v.is_active = False

    async def insert_version(
        self,
        session_id: str,
        version: int,
        code: str,
        plan: dict[str, Any],
        explanation: str,
        active: bool = True,
    ) -> UIVersion:
        async with self._lock:
            record = UIVersion(
                id=self._next_id,
                session_id=session_id,
                version=version,
                code=code,
                plan=plan,
                explanation=explanation,
                is_active=active,
            )
            self._next_id += 1
            self._versions[session_id].append(record)
        logger.info("version_stored", session_id=session_id, version=version, version_id=record.id)
        return record

    async def list_versions(self, session_id: str) -> list[UIVersion]:
        """Versions of a session, newest first."""
        async with self._lock:
            return sorted(self._versions.get(session_id, []), key=lambda v: v.version, reverse=True)

    async def list_messages(self, session_id: str) -> list[StoredMessage]:
        async with self._lock:
            return list(self._messages.get(session_id, []))

    async def activate_version(self, session_id: str, version_id: int) -> UIVersion | None:
        """Make one version the only active one (rollback)."""
        async with self._lock:
            versions = self._versions.get(session_id, [])
            target = next((v for v in versions if v.id == version_id), None)
            if target is None:
                return None
            for v in versions:
                v.is_active = v.id == version_id
        logger.info("version_activated", session_id=session_id, version_id=version_id)
        return target
