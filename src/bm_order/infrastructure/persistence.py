"""OrderRepository: concrete implementation of OrderRepositoryProtocol.

Status changes are UPDATE ... WHERE status = :from_status RETURNING, issued
after the row was locked with SELECT ... FOR UPDATE. Zero rows means another
transaction moved the order first.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.enums import OrderStatus
from src.bm_common.errors import InternalError
from src.bm_common.pagination import id_as_bigint
from src.bm_order.domain.models import Order, OrderItem, VendorOrderStats
from src.bm_order.domain.state_machine import TIMESTAMP_COLUMNS

_COLUMNS = (
    "id, buyer_id, vendor_id, status, subtotal, shipping, tax, total, currency, "
    "shipping_address, notes, cancel_reason, tracking_number, created_at, updated_at, "
    "paid_at, processing_at, shipped_at, delivered_at, cancelled_at, disputed_at, refunded_at"
)

_INSERT_ORDER_SQL = text(f"""
    INSERT INTO orders
        (id, buyer_id, vendor_id, status, subtotal, shipping, tax, total, currency,
         shipping_address, notes)
    VALUES
        (:id, :buyer_id, :vendor_id, :status, :subtotal, :shipping, :tax, :total, :currency,
         :shipping_address, :notes)
    RETURNING {_COLUMNS}
""")

_INSERT_ITEM_SQL = text("""
    INSERT INTO order_items (order_id, listing_id, title, quantity, unit_price, line_total)
    VALUES (:order_id, :listing_id, :title, :quantity, :unit_price, :line_total)
    RETURNING id
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM orders WHERE id = :order_id")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM orders WHERE id = :order_id FOR UPDATE")

_ITEMS_SQL = text("""
    SELECT id, order_id, listing_id, title, quantity, unit_price, line_total
    FROM order_items
    WHERE order_id = ANY(:order_ids)
    ORDER BY id
""")


def _transition_sql(timestamp_column: str) -> Any:
    return text(f"""
        UPDATE orders
        SET status = :to_status,
            {timestamp_column} = NOW(),
            cancel_reason = COALESCE(CAST(:cancel_reason AS TEXT), cancel_reason),
            tracking_number = COALESCE(CAST(:tracking_number AS TEXT), tracking_number),
            updated_at = NOW()
        WHERE id = :order_id AND status = :from_status
        RETURNING {_COLUMNS}
    """)


_TRANSITION_SQL = {status: _transition_sql(col) for status, col in TIMESTAMP_COLUMNS.items()}


def _list_sql(owner_column: str) -> Any:
    return text(f"""
        SELECT {_COLUMNS}
        FROM orders
        WHERE {owner_column} = :owner_id
          AND (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
          AND (CAST(:cursor_id AS BIGINT) IS NULL OR CAST(id AS BIGINT) < :cursor_id)
        ORDER BY CAST(id AS BIGINT) DESC
        LIMIT :limit
    """)


_LIST_BY_BUYER_SQL = _list_sql("buyer_id")
_LIST_BY_VENDOR_SQL = _list_sql("vendor_id")

_VENDOR_STATS_SQL = text("""
    SELECT COUNT(*) AS total_orders,
           COUNT(*) FILTER (WHERE status IN ('pending', 'paid', 'processing')) AS pending_orders,
           COALESCE(SUM(total) FILTER (WHERE status = 'delivered'), 0) AS total_sales
    FROM orders
    WHERE vendor_id = :vendor_id
""")


def _row_to_order(row: object) -> Order:
    return Order(
        id=row.id,  # type: ignore[attr-defined]
        buyer_id=row.buyer_id,  # type: ignore[attr-defined]
        vendor_id=row.vendor_id,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        subtotal=row.subtotal,  # type: ignore[attr-defined]
        shipping=row.shipping,  # type: ignore[attr-defined]
        tax=row.tax,  # type: ignore[attr-defined]
        total=row.total,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        shipping_address=row.shipping_address,  # type: ignore[attr-defined]
        notes=row.notes,  # type: ignore[attr-defined]
        cancel_reason=row.cancel_reason,  # type: ignore[attr-defined]
        tracking_number=row.tracking_number,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        paid_at=row.paid_at,  # type: ignore[attr-defined]
        processing_at=row.processing_at,  # type: ignore[attr-defined]
        shipped_at=row.shipped_at,  # type: ignore[attr-defined]
        delivered_at=row.delivered_at,  # type: ignore[attr-defined]
        cancelled_at=row.cancelled_at,  # type: ignore[attr-defined]
        disputed_at=row.disputed_at,  # type: ignore[attr-defined]
        refunded_at=row.refunded_at,  # type: ignore[attr-defined]
    )


class OrderRepository:
    async def _attach_items(self, db: AsyncSession, orders: list[Order]) -> list[Order]:
        if not orders:
            return orders
        by_id = {order.id: order for order in orders}
        rows = (
            await db.execute(_ITEMS_SQL, {"order_ids": list(by_id)})
        ).fetchall()
        for row in rows:
            by_id[row.order_id].items.append(
                OrderItem(
                    id=row.id,
                    listing_id=row.listing_id,
                    title=row.title,
                    quantity=row.quantity,
                    unit_price=row.unit_price,
                    line_total=row.line_total,
                )
            )
        return orders

    async def save(self, db: AsyncSession, order: Order) -> Order:
        row = (
            await db.execute(
                _INSERT_ORDER_SQL,
                {
                    "id": order.id,
                    "buyer_id": order.buyer_id,
                    "vendor_id": order.vendor_id,
                    "status": order.status,
                    "subtotal": order.subtotal,
                    "shipping": order.shipping,
                    "tax": order.tax,
                    "total": order.total,
                    "currency": order.currency,
                    "shipping_address": order.shipping_address,
                    "notes": order.notes,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("Order insert returned no rows")
        saved = _row_to_order(row)
        for item in order.items:
            item_row = (
                await db.execute(
                    _INSERT_ITEM_SQL,
                    {
                        "order_id": saved.id,
                        "listing_id": item.listing_id,
                        "title": item.title,
                        "quantity": item.quantity,
                        "unit_price": item.unit_price,
                        "line_total": item.line_total,
                    },
                )
            ).fetchone()
            saved.items.append(
                OrderItem(
                    id=item_row.id if item_row else None,
                    listing_id=item.listing_id,
                    title=item.title,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
            )
        return saved

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None:
        row = (await db.execute(_GET_SQL, {"order_id": order_id})).fetchone()
        if row is None:
            return None
        return (await self._attach_items(db, [_row_to_order(row)]))[0]

    async def get_for_update(self, db: AsyncSession, order_id: str) -> Order | None:
        row = (await db.execute(_GET_FOR_UPDATE_SQL, {"order_id": order_id})).fetchone()
        if row is None:
            return None
        return (await self._attach_items(db, [_row_to_order(row)]))[0]

    async def transition(
        self,
        db: AsyncSession,
        order_id: str,
        from_status: str,
        to_status: str,
        cancel_reason: str | None = None,
        tracking_number: str | None = None,
    ) -> Order | None:
        row = (
            await db.execute(
                _TRANSITION_SQL[OrderStatus(to_status)],
                {
                    "order_id": order_id,
                    "from_status": from_status,
                    "to_status": to_status,
                    "cancel_reason": cancel_reason,
                    "tracking_number": tracking_number,
                },
            )
        ).fetchone()
        if row is None:
            return None
        return (await self._attach_items(db, [_row_to_order(row)]))[0]

    async def _list(
        self, db: AsyncSession, sql: Any, owner_id: str, status: str | None,
        cursor_id: str | None, limit: int,
    ) -> list[Order]:
        rows = (
            await db.execute(
                sql,
                {
                    "owner_id": owner_id,
                    "status": status,
                    "cursor_id": id_as_bigint(cursor_id),
                    "limit": limit,
                },
            )
        ).fetchall()
        return await self._attach_items(db, [_row_to_order(row) for row in rows])

    async def list_by_buyer(
        self,
        db: AsyncSession,
        buyer_id: str,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]:
        return await self._list(db, _LIST_BY_BUYER_SQL, buyer_id, status, cursor_id, limit)

    async def list_by_vendor(
        self,
        db: AsyncSession,
        vendor_id: str,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]:
        return await self._list(db, _LIST_BY_VENDOR_SQL, vendor_id, status, cursor_id, limit)

    async def vendor_stats(self, db: AsyncSession, vendor_id: str) -> VendorOrderStats:
        row = (await db.execute(_VENDOR_STATS_SQL, {"vendor_id": vendor_id})).fetchone()
        if row is None:
            return VendorOrderStats()
        return VendorOrderStats(
            total_orders=int(row.total_orders),
            pending_orders=int(row.pending_orders),
            total_sales=int(row.total_sales),
        )
