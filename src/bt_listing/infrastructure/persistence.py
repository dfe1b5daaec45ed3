"""ListingRepository and FavoriteRepository — raw text() SQL (no ORM).

asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
Array columns (wanted_items, images, flag_reasons) are bound as Python lists.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bt_listing.domain.models import Favorite, Listing

# Columns an owner may change through `update`.
UPDATABLE_COLUMNS: tuple[str, ...] = (
    "title",
    "description",
    "category",
    "condition",
    "location",
    "wanted_items",
    "images",
    "status",
)

_LISTING_COLUMNS = """
    id, user_id, title, description, category, condition, location,
    wanted_items, images, status, flagged, flag_reasons, views,
    created_at, updated_at
"""

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_INSERT_LISTING_SQL = text(f"""
    INSERT INTO listings (
        id, user_id, title, description, category, condition, location,
        wanted_items, images, status, flagged, flag_reasons
    ) VALUES (
        :id, :user_id, :title, :description, :category, :condition, :location,
        :wanted_items, :images, :status, :flagged, :flag_reasons
    )
    RETURNING {_LISTING_COLUMNS}
""")

_GET_LISTING_SQL = text(f"SELECT {_LISTING_COLUMNS} FROM listings WHERE id = :listing_id")

_LIST_ACTIVE_SQL = text(f"""
    SELECT {_LISTING_COLUMNS}
    FROM listings
    WHERE status = 'ACTIVE'
        AND (
            CAST(:search AS TEXT) IS NULL
            OR title ILIKE '%' || CAST(:search AS TEXT) || '%'
            OR description ILIKE '%' || CAST(:search AS TEXT) || '%'
        )
        AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
        AND (
            CAST(:location AS TEXT) IS NULL
            OR location ILIKE '%' || CAST(:location AS TEXT) || '%'
        )
        AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS TEXT)
            )
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_BY_USER_SQL = text(f"""
    SELECT {_LISTING_COLUMNS}
    FROM listings
    WHERE user_id = :user_id
    ORDER BY created_at DESC, id DESC
""")

_SET_STATUS_SQL = text("""
    UPDATE listings SET status = :status, updated_at = NOW()
    WHERE id = :listing_id
""")

_DELETE_LISTING_SQL = text("DELETE FROM listings WHERE id = :listing_id RETURNING id")

_INCREMENT_VIEWS_SQL = text("""
    UPDATE listings SET views = views + 1
    WHERE id = :listing_id
    RETURNING views
""")

_INSERT_FAVORITE_SQL = text("""
    INSERT INTO favorites (id, user_id, listing_id)
    VALUES (:id, :user_id, :listing_id)
    ON CONFLICT (user_id, listing_id) DO NOTHING
    RETURNING id, user_id, listing_id, created_at
""")

_GET_FAVORITE_SQL = text("""
    SELECT id, user_id, listing_id, created_at
    FROM favorites
    WHERE user_id = :user_id AND listing_id = :listing_id
""")

_DELETE_FAVORITE_SQL = text("""
    DELETE FROM favorites
    WHERE user_id = :user_id AND listing_id = :listing_id
    RETURNING id
""")

_LIST_FAVORITE_LISTINGS_SQL = text("""
    SELECT l.id, l.user_id, l.title, l.description, l.category, l.condition,
           l.location, l.wanted_items, l.images, l.status, l.flagged,
           l.flag_reasons, l.views, l.created_at, l.updated_at
    FROM favorites f
    JOIN listings l ON l.id = f.listing_id
    WHERE f.user_id = :user_id
    ORDER BY f.created_at DESC
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_listing(row: Any) -> Listing:
    return Listing(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        category=row.category,
        status=row.status,
        condition=row.condition,
        location=row.location,
        wanted_items=list(row.wanted_items or []),
        images=list(row.images or []),
        flagged=bool(row.flagged),
        flag_reasons=list(row.flag_reasons or []),
        views=row.views or 0,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_favorite(row: Any) -> Favorite:
    return Favorite(
        id=row.id,
        user_id=row.user_id,
        listing_id=row.listing_id,
        created_at=row.created_at,
    )


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class ListingRepository:
    """Concrete implementation of ListingRepositoryProtocol."""

    async def insert(self, db: AsyncSession, listing: Listing) -> Listing:
        result = await db.execute(
            _INSERT_LISTING_SQL,
            {
                "id": listing.id,
                "user_id": listing.user_id,
                "title": listing.title,
                "description": listing.description,
                "category": listing.category,
                "condition": listing.condition,
                "location": listing.location,
                "wanted_items": listing.wanted_items,
                "images": listing.images,
                "status": listing.status,
                "flagged": listing.flagged,
                "flag_reasons": listing.flag_reasons,
            },
        )
        return _row_to_listing(result.fetchone())

    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None:
        row = (await db.execute(_GET_LISTING_SQL, {"listing_id": listing_id})).fetchone()
        return _row_to_listing(row) if row else None

    async def list_active(
        self,
        db: AsyncSession,
        search: str | None,
        category: str | None,
        location: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Listing]:
        # asyncpg needs a datetime, not an ISO string, for TIMESTAMPTZ params.
        cursor_ts_dt = datetime.fromisoformat(cursor_ts) if cursor_ts is not None else None
        result = await db.execute(
            _LIST_ACTIVE_SQL,
            {
                "search": search,
                "category": category,
                "location": location,
                "cursor_ts": cursor_ts_dt,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_listing(row) for row in result.fetchall()]

    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Listing]:
        result = await db.execute(_LIST_BY_USER_SQL, {"user_id": user_id})
        return [_row_to_listing(row) for row in result.fetchall()]

    async def update(
        self, db: AsyncSession, listing_id: str, changes: dict[str, Any]
    ) -> Listing | None:
        columns = [c for c in UPDATABLE_COLUMNS if c in changes]
        if not columns:
            return await self.get_by_id(db, listing_id)
        assignments = ", ".join(f"{c} = :{c}" for c in columns)
        sql = text(f"""
            UPDATE listings SET {assignments}, updated_at = NOW()
            WHERE id = :listing_id
            RETURNING {_LISTING_COLUMNS}
        """)
        params = {c: changes[c] for c in columns}
        params["listing_id"] = listing_id
        row = (await db.execute(sql, params)).fetchone()
        return _row_to_listing(row) if row else None

    async def set_status(self, db: AsyncSession, listing_id: str, status: str) -> None:
        await db.execute(_SET_STATUS_SQL, {"listing_id": listing_id, "status": status})

    async def delete(self, db: AsyncSession, listing_id: str) -> bool:
        result = await db.execute(_DELETE_LISTING_SQL, {"listing_id": listing_id})
        return result.fetchone() is not None

    async def increment_views(self, db: AsyncSession, listing_id: str) -> int | None:
        result = await db.execute(_INCREMENT_VIEWS_SQL, {"listing_id": listing_id})
        row = result.fetchone()
        return row.views if row else None


class FavoriteRepository:
    """Concrete implementation of FavoriteRepositoryProtocol."""

    async def insert_if_absent(self, db: AsyncSession, favorite: Favorite) -> Favorite:
        params = {
            "id": favorite.id,
            "user_id": favorite.user_id,
            "listing_id": favorite.listing_id,
        }
        row = (await db.execute(_INSERT_FAVORITE_SQL, params)).fetchone()
        if row is None:
            row = (await db.execute(_GET_FAVORITE_SQL, params)).fetchone()
        return _row_to_favorite(row)

    async def delete(self, db: AsyncSession, user_id: str, listing_id: str) -> bool:
        result = await db.execute(
            _DELETE_FAVORITE_SQL, {"user_id": user_id, "listing_id": listing_id}
        )
        return result.fetchone() is not None

    async def list_listings(self, db: AsyncSession, user_id: str) -> list[Listing]:
        result = await db.execute(_LIST_FAVORITE_LISTINGS_SQL, {"user_id": user_id})
        return [_row_to_listing(row) for row in result.fetchall()]
