"""Shared dependencies for API routes: the in-process session registry."""

import logging
import uuid
from typing import Callable

from models.session import SessionContext
from services.oracle_client import OracleClient
from services.session import MatchingSession

logger = logging.getLogger(__name__)

OracleFactory = Callable[[SessionContext], OracleClient]


class SessionRegistry:
    def __init__(self, oracle_factory: OracleFactory = OracleClient) -> None:
        self._oracle_factory = oracle_factory
        self._sessions: dict[str, MatchingSession] = {}

    async def create(self, context: SessionContext) -> tuple[str, MatchingSession]:
        session_id = uuid.uuid4().hex
        session = MatchingSession(context, self._oracle_factory(context))
        try:
            await session.start()
        except Exception:
            await session.close()
            raise
        self._sessions[session_id] = session
        logger.info("Session %s started", session_id)
        return session_id, session

    def get(self, session_id: str) -> MatchingSession:
        """Raises KeyError for unknown or closed sessions."""
        return self._sessions[session_id]

    async def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id)
        await session.close()
        logger.info("Session %s closed", session_id)

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)

    def __len__(self) -> int:
        return len(self._sessions)


_registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    return _registry
