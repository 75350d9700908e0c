"""Agreement draft cache - survives navigation, never authoritative"""

import logging
from typing import Optional

from pydantic import ValidationError as SchemaError

from ...cache import Cache, cache
from ...config import AGREEMENT_DRAFT_TTL
from .schemas import AgreementDraft

logger = logging.getLogger(__name__)


class AgreementDraftStore:
    def __init__(self, backend: Cache = cache, ttl: int = AGREEMENT_DRAFT_TTL):
        self.backend = backend
        self.ttl = ttl

    @staticmethod
    def key(session_id: str) -> str:
        return f"agreement_draft:{session_id}"

    async def save(self, session_id: str, draft: AgreementDraft) -> bool:
        return await self.backend.set(self.key(session_id), draft.model_dump(mode="json"), self.ttl)

    async def load(self, session_id: str) -> Optional[AgreementDraft]:
        data = await self.backend.get(self.key(session_id))
        if data is None:
            return None
        try:
            return AgreementDraft.model_validate(data)
        except SchemaError as e:
            logger.error(f"❌ Discarding unreadable agreement draft for {session_id}: {e}")
            await self.backend.delete(self.key(session_id))
            return None

    async def clear(self, session_id: str) -> bool:
        return await self.backend.delete(self.key(session_id))


draft_store = AgreementDraftStore()


def get_draft_store() -> AgreementDraftStore:
    """Dependency injection for AgreementDraftStore"""
    return draft_store
