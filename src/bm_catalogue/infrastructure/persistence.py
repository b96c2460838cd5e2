"""ListingRepository: concrete implementation of ListingRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
Stock moves are single conditional UPDATEs so concurrent checkouts never oversell.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_catalogue.domain.models import BrowseFilter, Category, Listing
from src.bm_common.errors import InternalError
from src.bm_common.pagination import id_as_bigint

_COLUMNS = (
    "id, vendor_id, title, description, category, condition, price, stock, "
    "is_active, view_count, created_at, updated_at"
)

# sort name -> (column, direction, cursor cast type)
SORTS: dict[str, tuple[str, str, str]] = {
    "newest": ("created_at", "DESC", "TIMESTAMPTZ"),
    "price_asc": ("price", "ASC", "BIGINT"),
    "price_desc": ("price", "DESC", "BIGINT"),
    "popular": ("view_count", "DESC", "BIGINT"),
}

_BROWSE_FILTERS = """
    is_active = TRUE
    AND (CAST(:search AS TEXT) IS NULL
         OR title ILIKE '%' || CAST(:search AS TEXT) || '%'
         OR description ILIKE '%' || CAST(:search AS TEXT) || '%')
    AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
    AND (CAST(:min_price AS BIGINT) IS NULL OR price >= CAST(:min_price AS BIGINT))
    AND (CAST(:max_price AS BIGINT) IS NULL OR price <= CAST(:max_price AS BIGINT))
    AND (CAST(:condition AS TEXT) IS NULL OR condition = CAST(:condition AS TEXT))
    AND (CAST(:vendor_id AS TEXT) IS NULL OR vendor_id = CAST(:vendor_id AS TEXT))
"""


def _browse_sql(column: str, direction: str, cast: str) -> Any:
    op = "<" if direction == "DESC" else ">"
    return text(f"""
        SELECT {_COLUMNS}
        FROM listings
        WHERE {_BROWSE_FILTERS}
          AND (
              CAST(:cursor_value AS {cast}) IS NULL
              OR {column} {op} CAST(:cursor_value AS {cast})
              OR ({column} = CAST(:cursor_value AS {cast})
                  AND CAST(id AS BIGINT) {op} CAST(:cursor_id AS BIGINT))
          )
        ORDER BY {column} {direction}, CAST(id AS BIGINT) {direction}
        LIMIT :limit
    """)


_BROWSE_SQL = {name: _browse_sql(*spec) for name, spec in SORTS.items()}

_GET_SQL = text(f"SELECT {_COLUMNS} FROM listings WHERE id = :listing_id")

_RECORD_VIEW_SQL = text(f"""
    UPDATE listings
    SET view_count = view_count + 1
    WHERE id = :listing_id AND is_active = TRUE
    RETURNING {_COLUMNS}
""")

_LIST_BY_VENDOR_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM listings
    WHERE vendor_id = :vendor_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR CAST(id AS BIGINT) < :cursor_id)
    ORDER BY CAST(id AS BIGINT) DESC
    LIMIT :limit
""")

_INSERT_SQL = text(f"""
    INSERT INTO listings
        (id, vendor_id, title, description, category, condition, price, stock, is_active)
    VALUES
        (:id, :vendor_id, :title, :description, :category, :condition, :price, :stock, :is_active)
    RETURNING {_COLUMNS}
""")

_UPDATE_SQL = text(f"""
    UPDATE listings
    SET title       = COALESCE(CAST(:title AS TEXT), title),
        description = COALESCE(CAST(:description AS TEXT), description),
        category    = COALESCE(CAST(:category AS TEXT), category),
        condition   = COALESCE(CAST(:condition AS TEXT), condition),
        price       = COALESCE(CAST(:price AS BIGINT), price),
        stock       = COALESCE(CAST(:stock AS INTEGER), stock),
        updated_at  = NOW()
    WHERE id = :listing_id AND vendor_id = :vendor_id
    RETURNING {_COLUMNS}
""")

_DELETE_SQL = text(
    "DELETE FROM listings WHERE id = :listing_id AND vendor_id = :vendor_id RETURNING id"
)

_TOGGLE_SQL = text(f"""
    UPDATE listings
    SET is_active = NOT is_active, updated_at = NOW()
    WHERE id = :listing_id AND vendor_id = :vendor_id
    RETURNING {_COLUMNS}
""")

_RESERVE_STOCK_SQL = text(f"""
    UPDATE listings
    SET stock = stock - :quantity, updated_at = NOW()
    WHERE id = :listing_id AND is_active = TRUE AND stock >= :quantity
    RETURNING {_COLUMNS}
""")

_RESTORE_STOCK_SQL = text("""
    UPDATE listings
    SET stock = stock + :quantity, updated_at = NOW()
    WHERE id = :listing_id
""")

_COUNT_FOR_VENDOR_SQL = text("""
    SELECT COUNT(*) AS total,
           COUNT(*) FILTER (WHERE is_active) AS active
    FROM listings
    WHERE vendor_id = :vendor_id
""")

_CATEGORIES_SQL = text("""
    SELECT category, COUNT(*) AS n
    FROM listings
    WHERE is_active = TRUE
    GROUP BY category
    ORDER BY category
""")

_CATEGORY_SQL = text("""
    SELECT category, COUNT(*) AS n
    FROM listings
    WHERE is_active = TRUE AND category = :slug
    GROUP BY category
""")

_UPDATABLE = ("title", "description", "category", "condition", "price", "stock")


def _row_to_listing(row: object) -> Listing:
    return Listing(
        id=row.id,  # type: ignore[attr-defined]
        vendor_id=row.vendor_id,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        condition=row.condition,  # type: ignore[attr-defined]
        price=row.price,  # type: ignore[attr-defined]
        stock=row.stock,  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        view_count=row.view_count,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class ListingRepository:
    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None:
        row = (await db.execute(_GET_SQL, {"listing_id": listing_id})).fetchone()
        return _row_to_listing(row) if row else None

    async def browse(
        self,
        db: AsyncSession,
        filters: BrowseFilter,
        sort: str,
        cursor_key: tuple[Any, str] | None,
        limit: int,
    ) -> list[Listing]:
        cursor_value, cursor_id = cursor_key if cursor_key else (None, None)
        result = await db.execute(
            _BROWSE_SQL[sort],
            {
                "search": filters.search,
                "category": filters.category,
                "min_price": filters.min_price,
                "max_price": filters.max_price,
                "condition": filters.condition,
                "vendor_id": filters.vendor_id,
                "cursor_value": cursor_value,
                "cursor_id": id_as_bigint(cursor_id),
                "limit": limit,
            },
        )
        return [_row_to_listing(row) for row in result.fetchall()]

    async def record_view(self, db: AsyncSession, listing_id: str) -> Listing | None:
        row = (await db.execute(_RECORD_VIEW_SQL, {"listing_id": listing_id})).fetchone()
        return _row_to_listing(row) if row else None

    async def list_by_vendor(
        self,
        db: AsyncSession,
        vendor_id: str,
        cursor_id: str | None,
        limit: int,
    ) -> list[Listing]:
        result = await db.execute(
            _LIST_BY_VENDOR_SQL,
            {"vendor_id": vendor_id, "cursor_id": id_as_bigint(cursor_id), "limit": limit},
        )
        return [_row_to_listing(row) for row in result.fetchall()]

    async def create(self, db: AsyncSession, listing: Listing) -> Listing:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": listing.id,
                "vendor_id": listing.vendor_id,
                "title": listing.title,
                "description": listing.description,
                "category": listing.category,
                "condition": listing.condition,
                "price": listing.price,
                "stock": listing.stock,
                "is_active": listing.is_active,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Listing insert returned no rows")
        return _row_to_listing(row)

    async def update(
        self, db: AsyncSession, listing_id: str, vendor_id: str, fields: dict[str, Any]
    ) -> Listing | None:
        params: dict[str, Any] = {name: fields.get(name) for name in _UPDATABLE}
        params.update({"listing_id": listing_id, "vendor_id": vendor_id})
        row = (await db.execute(_UPDATE_SQL, params)).fetchone()
        return _row_to_listing(row) if row else None

    async def delete(self, db: AsyncSession, listing_id: str, vendor_id: str) -> bool:
        result = await db.execute(
            _DELETE_SQL, {"listing_id": listing_id, "vendor_id": vendor_id}
        )
        return result.fetchone() is not None

    async def toggle_active(
        self, db: AsyncSession, listing_id: str, vendor_id: str
    ) -> Listing | None:
        row = (
            await db.execute(_TOGGLE_SQL, {"listing_id": listing_id, "vendor_id": vendor_id})
        ).fetchone()
        return _row_to_listing(row) if row else None

    async def reserve_stock(
        self, db: AsyncSession, listing_id: str, quantity: int
    ) -> Listing | None:
        row = (
            await db.execute(
                _RESERVE_STOCK_SQL, {"listing_id": listing_id, "quantity": quantity}
            )
        ).fetchone()
        return _row_to_listing(row) if row else None

    async def restore_stock(self, db: AsyncSession, listing_id: str, quantity: int) -> None:
        await db.execute(_RESTORE_STOCK_SQL, {"listing_id": listing_id, "quantity": quantity})

    async def count_for_vendor(self, db: AsyncSession, vendor_id: str) -> tuple[int, int]:
        row = (await db.execute(_COUNT_FOR_VENDOR_SQL, {"vendor_id": vendor_id})).fetchone()
        if row is None:
            return 0, 0
        return int(row.total), int(row.active)

    async def list_categories(self, db: AsyncSession) -> list[Category]:
        rows = (await db.execute(_CATEGORIES_SQL)).fetchall()
        return [Category(slug=row.category, listing_count=int(row.n)) for row in rows]

    async def get_category(self, db: AsyncSession, slug: str) -> Category | None:
        row = (await db.execute(_CATEGORY_SQL, {"slug": slug})).fetchone()
        return Category(slug=row.category, listing_count=int(row.n)) if row else None
