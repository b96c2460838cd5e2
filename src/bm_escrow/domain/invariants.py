"""Global money invariants across the whole store.

INV-1: every held escrow's amount equals its order's total
INV-2: every wallet's balance equals the sum of its ledger entries
INV-3: every wallet's locked_balance equals the sum of held escrows it funds
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_ESCROW_AMOUNT_SQL = text("""
    SELECT e.order_id, e.amount, o.total
    FROM escrows e
    JOIN orders o ON o.id = e.order_id
    WHERE e.status = 'held' AND e.amount <> o.total
""")

_LEDGER_SUM_SQL = text("""
    SELECT w.id, w.balance, COALESCE(SUM(l.amount), 0) AS ledger_sum
    FROM wallets w
    LEFT JOIN ledger_entries l ON l.wallet_id = w.id
    GROUP BY w.id, w.balance
    HAVING w.balance <> COALESCE(SUM(l.amount), 0)
""")

_LOCKED_SUM_SQL = text("""
    SELECT w.id, w.locked_balance, COALESCE(SUM(e.amount), 0) AS held_sum
    FROM wallets w
    LEFT JOIN escrows e ON e.buyer_wallet_id = w.id AND e.status = 'held'
    GROUP BY w.id, w.locked_balance
    HAVING w.locked_balance <> COALESCE(SUM(e.amount), 0)
""")


async def verify_global_invariants(db: AsyncSession) -> list[str]:
    """Returns list of violation strings; empty on a consistent store."""
    violations: list[str] = []

    for row in (await db.execute(_ESCROW_AMOUNT_SQL)).fetchall():
        violations.append(
            f"INV-1 violated: escrow for order {row.order_id} holds {row.amount} "
            f"!= order total {row.total}"
        )
    for row in (await db.execute(_LEDGER_SUM_SQL)).fetchall():
        violations.append(
            f"INV-2 violated: wallet {row.id} balance {row.balance} "
            f"!= ledger sum {row.ledger_sum}"
        )
    for row in (await db.execute(_LOCKED_SUM_SQL)).fetchall():
        violations.append(
            f"INV-3 violated: wallet {row.id} locked_balance {row.locked_balance} "
            f"!= held escrows {row.held_sum}"
        )

    for msg in violations:
        logger.error(msg)
    return violations
