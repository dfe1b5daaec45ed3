"""ModerationRepository Protocol — reports, blocks and bans."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_moderation.domain.models import ListingReport, UserBan, UserBlock, UserReport


class BanWriterProtocol(Protocol):
    """The one capability the abuse tracker needs."""

    async def insert_ban(self, db: AsyncSession, ban: UserBan) -> UserBan: ...


class ModerationRepositoryProtocol(BanWriterProtocol, Protocol):
    async def insert_user_report(self, db: AsyncSession, report: UserReport) -> UserReport: ...

    async def insert_listing_report(
        self, db: AsyncSession, report: ListingReport
    ) -> ListingReport: ...

    async def listing_exists(self, db: AsyncSession, listing_id: str) -> bool: ...

    async def user_exists(self, db: AsyncSession, user_id: str) -> bool: ...

    async def insert_block_if_absent(self, db: AsyncSession, block: UserBlock) -> UserBlock: ...

    async def delete_block(
        self, db: AsyncSession, user_id: str, blocked_user_id: str
    ) -> bool: ...

    async def list_blocked_ids(self, db: AsyncSession, user_id: str) -> list[str]: ...

    async def lift_bans(self, db: AsyncSession, user_id: str) -> int: ...

    async def has_active_ban(self, db: AsyncSession, user_id: str) -> bool: ...
