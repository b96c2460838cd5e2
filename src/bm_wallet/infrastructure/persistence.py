"""WalletRepository: concrete implementation of WalletRepositoryProtocol.

All balance-mutating operations use atomic PostgreSQL UPDATE ... RETURNING.
A result of 0 rows means a business constraint was violated (a balance would
go negative); the Ledger turns that into InsufficientFundsError.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bm_common.errors import InternalError
from src.bm_common.id_generator import generate_id
from src.bm_wallet.domain.models import LedgerEntry, Wallet

_WALLET_COLUMNS = "id, owner_id, balance, locked_balance, currency, version, created_at, updated_at"
_LEDGER_COLUMNS = (
    "id, wallet_id, entry_type, amount, balance_after, order_id, description, created_at"
)

_GET_BY_OWNER_SQL = text(f"SELECT {_WALLET_COLUMNS} FROM wallets WHERE owner_id = :owner_id")

_GET_BY_ID_SQL = text(f"SELECT {_WALLET_COLUMNS} FROM wallets WHERE id = :wallet_id")

_GET_OR_CREATE_SQL = text(f"""
    INSERT INTO wallets (id, owner_id, currency)
    VALUES (:id, :owner_id, :currency)
    ON CONFLICT (owner_id) DO UPDATE
        SET updated_at = NOW()
    RETURNING {_WALLET_COLUMNS}
""")

_APPLY_DELTA_SQL = text(f"""
    UPDATE wallets
    SET balance        = balance + :balance_delta,
        locked_balance = locked_balance + :locked_delta,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :wallet_id
      AND balance + :balance_delta >= 0
      AND locked_balance + :locked_delta >= 0
    RETURNING {_WALLET_COLUMNS}
""")

_INSERT_LEDGER_SQL = text(f"""
    INSERT INTO ledger_entries
        (wallet_id, entry_type, amount, balance_after, order_id, description)
    VALUES
        (:wallet_id, :entry_type, :amount, :balance_after, :order_id, :description)
    RETURNING {_LEDGER_COLUMNS}
""")

_LIST_LEDGER_SQL = text(f"""
    SELECT {_LEDGER_COLUMNS}
    FROM ledger_entries
    WHERE wallet_id = :wallet_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:entry_type AS VARCHAR) IS NULL OR entry_type = :entry_type)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_wallet(row: object) -> Wallet:
    return Wallet(
        id=row.id,  # type: ignore[attr-defined]
        owner_id=row.owner_id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        locked_balance=row.locked_balance,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        wallet_id=row.wallet_id,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        order_id=row.order_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class WalletRepository:
    """Concrete repository: all mutations atomic at the SQL level."""

    async def get_by_owner(self, db: AsyncSession, owner_id: str) -> Wallet | None:
        row = (await db.execute(_GET_BY_OWNER_SQL, {"owner_id": owner_id})).fetchone()
        return _row_to_wallet(row) if row else None

    async def get_by_id(self, db: AsyncSession, wallet_id: str) -> Wallet | None:
        row = (await db.execute(_GET_BY_ID_SQL, {"wallet_id": wallet_id})).fetchone()
        return _row_to_wallet(row) if row else None

    async def get_or_create(self, db: AsyncSession, owner_id: str, currency: str) -> Wallet:
        result = await db.execute(
            _GET_OR_CREATE_SQL,
            {"id": generate_id(), "owner_id": owner_id, "currency": currency},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Wallet upsert returned no rows")
        return _row_to_wallet(row)

    async def apply_delta(
        self,
        db: AsyncSession,
        wallet_id: str,
        balance_delta: int,
        locked_delta: int,
    ) -> Wallet | None:
        result = await db.execute(
            _APPLY_DELTA_SQL,
            {
                "wallet_id": wallet_id,
                "balance_delta": balance_delta,
                "locked_delta": locked_delta,
            },
        )
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def insert_ledger_entry(
        self,
        db: AsyncSession,
        wallet_id: str,
        entry_type: str,
        amount: int,
        balance_after: int,
        order_id: str | None,
        description: str | None,
    ) -> LedgerEntry:
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "wallet_id": wallet_id,
                "entry_type": entry_type,
                "amount": amount,
                "balance_after": balance_after,
                "order_id": order_id,
                "description": description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows")
        return _row_to_ledger(row)

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        wallet_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "wallet_id": wallet_id,
                "cursor_id": cursor_id,
                "entry_type": entry_type,
                "limit": limit,
            },
        )
        return [_row_to_ledger(row) for row in result.fetchall()]
