"""In-memory repositories conforming to the domain Protocols.

FakeSession mimics transaction boundaries: commit() snapshots every attached
repository and rollback() restores the last snapshot, so a failed service
call leaves the fakes exactly as the database would be left.
"""

import copy
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any

from src.bm_cart.domain.models import CartItem
from src.bm_catalogue.domain.models import BrowseFilter, Category, Listing
from src.bm_catalogue.infrastructure.persistence import SORTS
from src.bm_common.enums import DisputeStatus, EscrowStatus, OrderStatus
from src.bm_dispute.domain.models import Dispute, Evidence
from src.bm_escrow.domain.models import Escrow
from src.bm_order.domain.models import Order, VendorOrderStats
from src.bm_order.domain.state_machine import TIMESTAMP_COLUMNS
from src.bm_wallet.domain.models import LedgerEntry, Wallet
from src.bm_wishlist.domain.models import WishlistItem

_T0 = datetime(2026, 1, 1, tzinfo=UTC)


def _id_key(record_id: str) -> tuple[int, str]:
    """Numeric order for digit-only ids, as CAST(id AS BIGINT) sorts them."""
    return len(record_id), record_id


class _Snapshotting:
    _state: tuple[str, ...] = ()

    def snapshot(self) -> dict[str, Any]:
        return {name: copy.deepcopy(getattr(self, name)) for name in self._state}

    def restore(self, saved: dict[str, Any]) -> None:
        for name, value in saved.items():
            setattr(self, name, copy.deepcopy(value))


class FakeSession:
    def __init__(self, *repos: _Snapshotting) -> None:
        self._repos = repos
        self.commits = 0
        self.rollbacks = 0
        self._saved = [repo.snapshot() for repo in repos]

    def checkpoint(self) -> None:
        """Treat the current fake state as committed test setup."""
        self._saved = [repo.snapshot() for repo in self._repos]

    async def commit(self) -> None:
        self.commits += 1
        self._saved = [repo.snapshot() for repo in self._repos]

    async def rollback(self) -> None:
        self.rollbacks += 1
        for repo, saved in zip(self._repos, self._saved, strict=True):
            repo.restore(saved)


# ---------------------------------------------------------------------------
# Wallet
# ---------------------------------------------------------------------------


class FakeWalletRepo(_Snapshotting):
    _state = ("wallets", "entries")

    def __init__(self) -> None:
        self.wallets: dict[str, Wallet] = {}
        self.entries: list[LedgerEntry] = []

    def fund(self, owner_id: str, amount: int, currency: str = "UGX") -> Wallet:
        """Test helper: create the wallet with a recorded DEPOSIT."""
        wallet_id = f"w-{owner_id}"
        wallet = self.wallets.setdefault(wallet_id, Wallet(wallet_id, owner_id, 0, 0, currency, 0))
        wallet.balance += amount
        wallet.version += 1
        self.entries.append(
            LedgerEntry(len(self.entries) + 1, wallet_id, "DEPOSIT", amount, wallet.balance)
        )
        return replace(wallet)

    def ledger_sum(self, wallet_id: str) -> int:
        return sum(e.amount for e in self.entries if e.wallet_id == wallet_id)

    def by_owner(self, owner_id: str) -> Wallet:
        return next(w for w in self.wallets.values() if w.owner_id == owner_id)

    async def get_by_owner(self, db: Any, owner_id: str) -> Wallet | None:
        for wallet in self.wallets.values():
            if wallet.owner_id == owner_id:
                return replace(wallet)
        return None

    async def get_by_id(self, db: Any, wallet_id: str) -> Wallet | None:
        wallet = self.wallets.get(wallet_id)
        return replace(wallet) if wallet else None

    async def get_or_create(self, db: Any, owner_id: str, currency: str) -> Wallet:
        existing = await self.get_by_owner(db, owner_id)
        if existing is not None:
            return existing
        wallet = Wallet(f"w-{owner_id}", owner_id, 0, 0, currency, 0)
        self.wallets[wallet.id] = wallet
        return replace(wallet)

    async def apply_delta(
        self, db: Any, wallet_id: str, balance_delta: int, locked_delta: int
    ) -> Wallet | None:
        wallet = self.wallets.get(wallet_id)
        if wallet is None:
            return None
        if wallet.balance + balance_delta < 0 or wallet.locked_balance + locked_delta < 0:
            return None
        wallet.balance += balance_delta
        wallet.locked_balance += locked_delta
        wallet.version += 1
        return replace(wallet)

    async def insert_ledger_entry(
        self,
        db: Any,
        wallet_id: str,
        entry_type: str,
        amount: int,
        balance_after: int,
        order_id: str | None,
        description: str | None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            id=len(self.entries) + 1,
            wallet_id=wallet_id,
            entry_type=entry_type,
            amount=amount,
            balance_after=balance_after,
            order_id=order_id,
            description=description,
            created_at=_T0,
        )
        self.entries.append(entry)
        return replace(entry)

    async def list_ledger_entries(
        self,
        db: Any,
        wallet_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        rows = [
            e for e in self.entries
            if e.wallet_id == wallet_id
            and (entry_type is None or e.entry_type == entry_type)
            and (cursor_id is None or e.id < cursor_id)
        ]
        rows.sort(key=lambda e: e.id, reverse=True)
        return [replace(e) for e in rows[:limit]]


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


def make_listing(
    listing_id: str = "L1",
    vendor_id: str = "vendor-1",
    price: int = 4_500_000,
    stock: int = 10,
    is_active: bool = True,
    **kwargs: Any,
) -> Listing:
    return Listing(
        id=listing_id,
        vendor_id=vendor_id,
        title=kwargs.pop("title", f"Item {listing_id}"),
        description=kwargs.pop("description", "A fine item"),
        category=kwargs.pop("category", "electronics"),
        condition=kwargs.pop("condition", "new"),
        price=price,
        stock=stock,
        is_active=is_active,
        created_at=kwargs.pop("created_at", _T0),
        **kwargs,
    )


class FakeListingRepo(_Snapshotting):
    _state = ("listings",)

    def __init__(self, *listings: Listing) -> None:
        self.listings: dict[str, Listing] = {item.id: item for item in listings}

    async def get_by_id(self, db: Any, listing_id: str) -> Listing | None:
        listing = self.listings.get(listing_id)
        return replace(listing) if listing else None

    async def browse(
        self,
        db: Any,
        filters: BrowseFilter,
        sort: str,
        cursor_key: tuple[Any, str] | None,
        limit: int,
    ) -> list[Listing]:
        column, direction, _ = SORTS[sort]
        descending = direction == "DESC"

        def matches(item: Listing) -> bool:
            if not item.is_active:
                return False
            if filters.search and filters.search.lower() not in (
                item.title + " " + item.description
            ).lower():
                return False
            if filters.category and item.category != filters.category:
                return False
            if filters.condition and item.condition != filters.condition:
                return False
            if filters.vendor_id and item.vendor_id != filters.vendor_id:
                return False
            if filters.min_price is not None and item.price < filters.min_price:
                return False
            if filters.max_price is not None and item.price > filters.max_price:
                return False
            return True

        def key(item: Listing) -> tuple[Any, tuple[int, str]]:
            return getattr(item, column), _id_key(item.id)

        rows = sorted(
            (item for item in self.listings.values() if matches(item)),
            key=key,
            reverse=descending,
        )
        if cursor_key is not None:
            after = (cursor_key[0], _id_key(cursor_key[1]))
            rows = [
                item for item in rows
                if (key(item) < after) == descending and key(item) != after
            ]
        return [replace(item) for item in rows[:limit]]

    async def record_view(self, db: Any, listing_id: str) -> Listing | None:
        listing = self.listings.get(listing_id)
        if listing is None or not listing.is_active:
            return None
        listing.view_count += 1
        return replace(listing)

    async def list_by_vendor(
        self, db: Any, vendor_id: str, cursor_id: str | None, limit: int
    ) -> list[Listing]:
        rows = sorted(
            (
                item for item in self.listings.values()
                if item.vendor_id == vendor_id
                and (cursor_id is None or _id_key(item.id) < _id_key(cursor_id))
            ),
            key=lambda item: _id_key(item.id),
            reverse=True,
        )
        return [replace(item) for item in rows[:limit]]

    async def create(self, db: Any, listing: Listing) -> Listing:
        self.listings[listing.id] = replace(listing, created_at=_T0)
        return replace(self.listings[listing.id])

    async def update(
        self, db: Any, listing_id: str, vendor_id: str, fields: dict[str, Any]
    ) -> Listing | None:
        listing = self.listings.get(listing_id)
        if listing is None or listing.vendor_id != vendor_id:
            return None
        for name, value in fields.items():
            setattr(listing, name, value)
        return replace(listing)

    async def delete(self, db: Any, listing_id: str, vendor_id: str) -> bool:
        listing = self.listings.get(listing_id)
        if listing is None or listing.vendor_id != vendor_id:
            return False
        del self.listings[listing_id]
        return True

    async def toggle_active(self, db: Any, listing_id: str, vendor_id: str) -> Listing | None:
        listing = self.listings.get(listing_id)
        if listing is None or listing.vendor_id != vendor_id:
            return None
        listing.is_active = not listing.is_active
        return replace(listing)

    async def reserve_stock(self, db: Any, listing_id: str, quantity: int) -> Listing | None:
        listing = self.listings.get(listing_id)
        if listing is None or not listing.is_active or listing.stock < quantity:
            return None
        listing.stock -= quantity
        return replace(listing)

    async def restore_stock(self, db: Any, listing_id: str, quantity: int) -> None:
        listing = self.listings.get(listing_id)
        if listing is not None:
            listing.stock += quantity

    async def count_for_vendor(self, db: Any, vendor_id: str) -> tuple[int, int]:
        mine = [item for item in self.listings.values() if item.vendor_id == vendor_id]
        return len(mine), sum(1 for item in mine if item.is_active)

    async def list_categories(self, db: Any) -> list[Category]:
        counts: dict[str, int] = {}
        for item in self.listings.values():
            if item.is_active:
                counts[item.category] = counts.get(item.category, 0) + 1
        return [Category(slug, n) for slug, n in sorted(counts.items())]

    async def get_category(self, db: Any, slug: str) -> Category | None:
        return next((c for c in await self.list_categories(db) if c.slug == slug), None)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


class FakeCartRepo(_Snapshotting):
    """Cart rows keyed by (buyer_id, listing_id); list_items joins the listing fake."""

    _state = ("rows",)

    def __init__(self, listings: FakeListingRepo) -> None:
        self.rows: dict[tuple[str, str], int] = {}
        self._listings = listings

    async def list_items(self, db: Any, buyer_id: str) -> list[CartItem]:
        return self._items_for(buyer_id)

    def _items_for(self, buyer_id: str) -> list[CartItem]:
        items: list[CartItem] = []
        for (buyer, listing_id), quantity in self.rows.items():
            listing = self._listings.listings.get(listing_id)
            if buyer != buyer_id or listing is None:
                continue
            items.append(
                CartItem(
                    listing_id=listing.id,
                    vendor_id=listing.vendor_id,
                    title=listing.title,
                    unit_price=listing.price,
                    quantity=quantity,
                    stock=listing.stock,
                    is_active=listing.is_active,
                )
            )
        return items

    async def claim_items(self, db: Any, buyer_id: str) -> list[CartItem]:
        items = self._items_for(buyer_id)
        self.rows = {key: qty for key, qty in self.rows.items() if key[0] != buyer_id}
        return items

    async def get_quantity(self, db: Any, buyer_id: str, listing_id: str) -> int | None:
        return self.rows.get((buyer_id, listing_id))

    async def add_quantity(self, db: Any, buyer_id: str, listing_id: str, quantity: int) -> int:
        key = (buyer_id, listing_id)
        self.rows[key] = self.rows.get(key, 0) + quantity
        return self.rows[key]

    async def set_quantity(self, db: Any, buyer_id: str, listing_id: str, quantity: int) -> bool:
        key = (buyer_id, listing_id)
        if key not in self.rows:
            return False
        self.rows[key] = quantity
        return True

    async def remove(self, db: Any, buyer_id: str, listing_id: str) -> bool:
        return self.rows.pop((buyer_id, listing_id), None) is not None

    async def clear(self, db: Any, buyer_id: str) -> int:
        keys = [key for key in self.rows if key[0] == buyer_id]
        for key in keys:
            del self.rows[key]
        return len(keys)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class FakeOrderRepo(_Snapshotting):
    _state = ("orders",)

    def __init__(self) -> None:
        self.orders: dict[str, Order] = {}

    def set_status(self, order_id: str, status: OrderStatus) -> None:
        """Test helper: force an order into a status without side effects."""
        self.orders[order_id].status = status.value

    async def save(self, db: Any, order: Order) -> Order:
        stored = copy.deepcopy(order)
        stored.created_at = _T0 + timedelta(seconds=len(self.orders))
        for n, item in enumerate(stored.items, start=1):
            item.id = n
        self.orders[stored.id] = stored
        return copy.deepcopy(stored)

    async def get_by_id(self, db: Any, order_id: str) -> Order | None:
        order = self.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def get_for_update(self, db: Any, order_id: str) -> Order | None:
        return await self.get_by_id(db, order_id)

    async def transition(
        self,
        db: Any,
        order_id: str,
        from_status: str,
        to_status: str,
        cancel_reason: str | None = None,
        tracking_number: str | None = None,
    ) -> Order | None:
        order = self.orders.get(order_id)
        if order is None or order.status != from_status:
            return None
        order.status = to_status
        setattr(order, TIMESTAMP_COLUMNS[OrderStatus(to_status)], _T0)
        if cancel_reason is not None:
            order.cancel_reason = cancel_reason
        if tracking_number is not None:
            order.tracking_number = tracking_number
        return copy.deepcopy(order)

    def _list(
        self, match: Any, status: str | None, cursor_id: str | None, limit: int
    ) -> list[Order]:
        rows = sorted(
            (
                o for o in self.orders.values()
                if match(o)
                and (status is None or o.status == status)
                and (cursor_id is None or _id_key(o.id) < _id_key(cursor_id))
            ),
            key=lambda o: _id_key(o.id),
            reverse=True,
        )
        return [copy.deepcopy(o) for o in rows[:limit]]

    async def list_by_buyer(
        self, db: Any, buyer_id: str, status: str | None, cursor_id: str | None, limit: int
    ) -> list[Order]:
        return self._list(lambda o: o.buyer_id == buyer_id, status, cursor_id, limit)

    async def list_by_vendor(
        self, db: Any, vendor_id: str, status: str | None, cursor_id: str | None, limit: int
    ) -> list[Order]:
        return self._list(lambda o: o.vendor_id == vendor_id, status, cursor_id, limit)

    async def vendor_stats(self, db: Any, vendor_id: str) -> VendorOrderStats:
        mine = [o for o in self.orders.values() if o.vendor_id == vendor_id]
        open_statuses = {"pending", "paid", "processing"}
        return VendorOrderStats(
            total_orders=len(mine),
            pending_orders=sum(1 for o in mine if o.status in open_statuses),
            total_sales=sum(o.total for o in mine if o.status == "delivered"),
        )


# ---------------------------------------------------------------------------
# Escrow
# ---------------------------------------------------------------------------


class FakeEscrowRepo(_Snapshotting):
    _state = ("escrows",)

    def __init__(self) -> None:
        self.escrows: dict[str, Escrow] = {}

    async def save(self, db: Any, escrow: Escrow) -> Escrow:
        self.escrows[escrow.order_id] = replace(escrow, created_at=_T0)
        return replace(self.escrows[escrow.order_id])

    async def get_by_order(self, db: Any, order_id: str) -> Escrow | None:
        escrow = self.escrows.get(order_id)
        return replace(escrow) if escrow else None

    async def get_by_order_for_update(self, db: Any, order_id: str) -> Escrow | None:
        return await self.get_by_order(db, order_id)

    async def mark_resolved(self, db: Any, order_id: str, status: str) -> Escrow | None:
        escrow = self.escrows.get(order_id)
        if escrow is None or escrow.status != EscrowStatus.HELD.value:
            return None
        escrow.status = status
        escrow.frozen = False
        escrow.resolved_at = _T0
        return replace(escrow)

    async def set_frozen(self, db: Any, order_id: str, frozen: bool) -> Escrow | None:
        escrow = self.escrows.get(order_id)
        if escrow is None or escrow.status != EscrowStatus.HELD.value:
            return None
        escrow.frozen = frozen
        return replace(escrow)


# ---------------------------------------------------------------------------
# Disputes
# ---------------------------------------------------------------------------


class FakeDisputeRepo(_Snapshotting):
    _state = ("disputes",)

    def __init__(self) -> None:
        self.disputes: dict[str, Dispute] = {}

    async def save(self, db: Any, dispute: Dispute) -> Dispute:
        self.disputes[dispute.id] = copy.deepcopy(dispute)
        return copy.deepcopy(dispute)

    async def get_by_id(self, db: Any, dispute_id: str) -> Dispute | None:
        dispute = self.disputes.get(dispute_id)
        return copy.deepcopy(dispute) if dispute else None

    async def get_for_update(self, db: Any, dispute_id: str) -> Dispute | None:
        return await self.get_by_id(db, dispute_id)

    async def get_by_order(self, db: Any, order_id: str) -> Dispute | None:
        for dispute in self.disputes.values():
            if dispute.order_id == order_id:
                return copy.deepcopy(dispute)
        return None

    async def list_for_user(
        self,
        db: Any,
        user_id: str | None,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Dispute]:
        rows = sorted(
            (
                d for d in self.disputes.values()
                if (user_id is None or d.is_party(user_id))
                and (status is None or d.status == status)
                and (cursor_id is None or _id_key(d.id) < _id_key(cursor_id))
            ),
            key=lambda d: _id_key(d.id),
            reverse=True,
        )
        return [copy.deepcopy(d) for d in rows[:limit]]

    async def add_evidence(
        self, db: Any, dispute_id: str, submitted_by: str, kind: str, content: str
    ) -> Evidence:
        dispute = self.disputes[dispute_id]
        evidence = Evidence(
            id=sum(len(d.evidence) for d in self.disputes.values()) + 1,
            dispute_id=dispute_id,
            submitted_by=submitted_by,
            kind=kind,
            content=content,
            created_at=_T0,
        )
        dispute.evidence.append(evidence)
        return replace(evidence)

    async def update_status(
        self, db: Any, dispute_id: str, from_status: str, to_status: str
    ) -> Dispute | None:
        dispute = self.disputes.get(dispute_id)
        if dispute is None or dispute.status != from_status:
            return None
        dispute.status = to_status
        return copy.deepcopy(dispute)

    async def mark_resolved(
        self,
        db: Any,
        dispute_id: str,
        outcome: str,
        resolution_note: str | None,
        resolved_by: str,
    ) -> Dispute | None:
        dispute = self.disputes.get(dispute_id)
        if dispute is None or dispute.status == DisputeStatus.RESOLVED.value:
            return None
        dispute.status = DisputeStatus.RESOLVED.value
        dispute.outcome = outcome
        dispute.resolution_note = resolution_note
        dispute.resolved_by = resolved_by
        dispute.resolved_at = _T0
        return copy.deepcopy(dispute)


# ---------------------------------------------------------------------------
# Wishlist
# ---------------------------------------------------------------------------


class FakeWishlistRepo(_Snapshotting):
    _state = ("saved",)

    def __init__(self, listings: FakeListingRepo) -> None:
        # (buyer_id, listing_id) in insertion order
        self.saved: list[tuple[str, str]] = []
        self._listings = listings

    async def list_items(self, db: Any, buyer_id: str) -> list[WishlistItem]:
        items: list[WishlistItem] = []
        for buyer, listing_id in reversed(self.saved):
            listing = self._listings.listings.get(listing_id)
            if buyer != buyer_id or listing is None:
                continue
            items.append(
                WishlistItem(
                    listing_id=listing.id,
                    vendor_id=listing.vendor_id,
                    title=listing.title,
                    price=listing.price,
                    stock=listing.stock,
                    is_active=listing.is_active,
                    created_at=_T0,
                )
            )
        return items

    async def add(self, db: Any, buyer_id: str, listing_id: str) -> bool:
        if (buyer_id, listing_id) in self.saved:
            return False
        self.saved.append((buyer_id, listing_id))
        return True

    async def remove(self, db: Any, buyer_id: str, listing_id: str) -> bool:
        if (buyer_id, listing_id) not in self.saved:
            return False
        self.saved.remove((buyer_id, listing_id))
        return True

    async def contains(self, db: Any, buyer_id: str, listing_id: str) -> bool:
        return (buyer_id, listing_id) in self.saved

    async def count(self, db: Any, buyer_id: str) -> int:
        return sum(1 for buyer, _ in self.saved if buyer == buyer_id)


def ledger_types(repo: FakeWalletRepo, wallet_id: str) -> list[str]:
    return [e.entry_type for e in repo.entries if e.wallet_id == wallet_id]


class Marketplace:
    """Every fake wired together, plus the session that spans them."""

    def __init__(self, *listings: Listing) -> None:
        self.wallets = FakeWalletRepo()
        self.listings = FakeListingRepo(*listings)
        self.carts = FakeCartRepo(self.listings)
        self.orders = FakeOrderRepo()
        self.escrows = FakeEscrowRepo()
        self.disputes = FakeDisputeRepo()
        self.wishlist = FakeWishlistRepo(self.listings)
        self.db = FakeSession(
            self.wallets,
            self.listings,
            self.carts,
            self.orders,
            self.escrows,
            self.disputes,
            self.wishlist,
        )

    def balances(self, owner_id: str) -> tuple[int, int]:
        wallet = self.wallets.by_owner(owner_id)
        return wallet.balance, wallet.locked_balance
