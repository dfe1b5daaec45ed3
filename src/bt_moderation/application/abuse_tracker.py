"""AbuseTracker — report and spam counting with automatic bans.

One tracker per process (see `get_abuse_tracker`). The counter store decides
where counts live: in-process (default, lost on restart and not shared
between workers) or Redis (`ABUSE_COUNTER_BACKEND=redis`).

An auto-ban is committed as soon as it is written. Callers typically reject
the triggering action right afterwards, and that rollback must not take the
ban with it.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bt_common.datetime_utils import days_from_now
from src.bt_common.id_generator import generate_id
from src.bt_moderation.domain.constants import (
    AUTO_BAN_DAYS,
    REPORT_BAN_REASON,
    REPORT_BAN_THRESHOLD,
    SPAM_BAN_REASON,
    SPAM_THRESHOLD,
    SPAM_WINDOW_SECONDS,
)
from src.bt_moderation.domain.content_classifier import is_spam
from src.bt_moderation.domain.counters import AbuseCounterStore, InMemoryAbuseCounters
from src.bt_moderation.domain.models import UserBan
from src.bt_moderation.domain.repository import BanWriterProtocol
from src.bt_moderation.infrastructure.persistence import ModerationRepository
from src.bt_moderation.infrastructure.redis_counters import RedisAbuseCounters

logger = logging.getLogger(__name__)


class AbuseTracker:
    def __init__(
        self,
        counters: AbuseCounterStore,
        repo: BanWriterProtocol | None = None,
        report_threshold: int = REPORT_BAN_THRESHOLD,
        spam_threshold: int = SPAM_THRESHOLD,
    ) -> None:
        self._counters = counters
        self._repo: BanWriterProtocol = repo or ModerationRepository()
        self._report_threshold = report_threshold
        self._spam_threshold = spam_threshold

    async def record_report(self, db: AsyncSession, reported_user_id: str) -> bool:
        """Count one report against the user. Returns True if this report banned them."""
        count = await self._counters.incr_reports(reported_user_id)
        if count < self._report_threshold:
            return False
        await self.ban(db, reported_user_id, REPORT_BAN_REASON)
        return True

    async def check_spam(self, db: AsyncSession, user_id: str, content: str) -> bool:
        """True if `content` matches a spam pattern.

        A match counts toward the windowed spam threshold; reaching it bans
        the user. Clean content never touches the counters.
        """
        if not is_spam(content):
            return False
        count = await self._counters.record_spam(user_id)
        if count >= self._spam_threshold:
            await self.ban(db, user_id, SPAM_BAN_REASON)
        return True

    async def ban(self, db: AsyncSession, user_id: str, reason: str) -> UserBan:
        ban = UserBan(
            id=generate_id(),
            user_id=user_id,
            reason=reason,
            banned_until=days_from_now(AUTO_BAN_DAYS),
        )
        try:
            await self._repo.insert_ban(db, ban)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.warning("Auto-ban: user=%s reason=%s until=%s", user_id, reason, ban.banned_until)
        return ban


def build_counter_store(backend: str) -> AbuseCounterStore:
    if backend == "redis":
        return RedisAbuseCounters(window_seconds=SPAM_WINDOW_SECONDS)
    return InMemoryAbuseCounters(window_seconds=SPAM_WINDOW_SECONDS)


_tracker: AbuseTracker | None = None


def get_abuse_tracker() -> AbuseTracker:
    global _tracker  # noqa: PLW0603
    if _tracker is None:
        _tracker = AbuseTracker(build_counter_store(settings.ABUSE_COUNTER_BACKEND))
    return _tracker
