"""Ledger: every balance move writes one entry; sum(entries) == balance."""

import pytest

from src.bm_common.enums import LedgerEntryType
from src.bm_common.errors import InsufficientFundsError, ValidationError, WalletNotFoundError
from src.bm_wallet.domain.ledger import Ledger
from tests.fakes import FakeWalletRepo


@pytest.fixture
def repo() -> FakeWalletRepo:
    return FakeWalletRepo()


@pytest.fixture
def ledger(repo: FakeWalletRepo) -> Ledger:
    return Ledger(repo)


class TestAppend:
    async def test_credit_and_debit(self, repo: FakeWalletRepo, ledger: Ledger) -> None:
        wallet = repo.fund("buyer", 1_000)
        await ledger.append(None, wallet.id, 500, LedgerEntryType.DEPOSIT)
        after, entry = await ledger.append(None, wallet.id, -300, LedgerEntryType.WITHDRAW)

        assert after.balance == 1_200
        assert entry.balance_after == 1_200
        assert entry.amount == -300
        assert repo.ledger_sum(wallet.id) == after.balance

    async def test_zero_amount_rejected(self, repo: FakeWalletRepo, ledger: Ledger) -> None:
        wallet = repo.fund("buyer", 1_000)
        with pytest.raises(ValidationError):
            await ledger.append(None, wallet.id, 0, LedgerEntryType.DEPOSIT)

    async def test_overdraw_rejected_and_nothing_written(
        self, repo: FakeWalletRepo, ledger: Ledger
    ) -> None:
        wallet = repo.fund("buyer", 1_000)
        with pytest.raises(InsufficientFundsError):
            await ledger.append(None, wallet.id, -1_001, LedgerEntryType.WITHDRAW)
        assert repo.wallets[wallet.id].balance == 1_000
        assert len(repo.entries) == 1

    async def test_unknown_wallet(self, ledger: Ledger) -> None:
        with pytest.raises(WalletNotFoundError):
            await ledger.append(None, "missing", -1, LedgerEntryType.WITHDRAW)


class TestLocking:
    async def test_lock_moves_balance_to_locked(
        self, repo: FakeWalletRepo, ledger: Ledger
    ) -> None:
        wallet = repo.fund("buyer", 10_000)
        after, entry = await ledger.lock(None, wallet.id, 9_500, "o-1")

        assert (after.balance, after.locked_balance) == (500, 9_500)
        assert entry.entry_type == "ORDER_LOCK"
        assert entry.amount == -9_500
        assert repo.ledger_sum(wallet.id) == after.balance

    async def test_lock_more_than_balance(self, repo: FakeWalletRepo, ledger: Ledger) -> None:
        wallet = repo.fund("buyer", 100)
        with pytest.raises(InsufficientFundsError):
            await ledger.lock(None, wallet.id, 101, "o-1")

    async def test_unlock_reverses_lock(self, repo: FakeWalletRepo, ledger: Ledger) -> None:
        wallet = repo.fund("buyer", 10_000)
        await ledger.lock(None, wallet.id, 4_000, "o-1")
        after, entry = await ledger.unlock(None, wallet.id, 4_000, "o-1")

        assert (after.balance, after.locked_balance) == (10_000, 0)
        assert entry.entry_type == "ESCROW_REFUND"
        assert repo.ledger_sum(wallet.id) == 10_000

    async def test_unlock_more_than_locked(self, repo: FakeWalletRepo, ledger: Ledger) -> None:
        wallet = repo.fund("buyer", 10_000)
        with pytest.raises(InsufficientFundsError):
            await ledger.unlock(None, wallet.id, 1, "o-1")

    async def test_settle_locked_writes_no_entry(
        self, repo: FakeWalletRepo, ledger: Ledger
    ) -> None:
        wallet = repo.fund("buyer", 10_000)
        await ledger.lock(None, wallet.id, 4_000, "o-1")
        entries_before = len(repo.entries)
        after = await ledger.settle_locked(None, wallet.id, 4_000, "o-1")

        assert (after.balance, after.locked_balance) == (6_000, 0)
        assert len(repo.entries) == entries_before
        assert repo.ledger_sum(wallet.id) == after.balance

    @pytest.mark.parametrize("amount", [0, -5])
    async def test_non_positive_lock_rejected(
        self, repo: FakeWalletRepo, ledger: Ledger, amount: int
    ) -> None:
        wallet = repo.fund("buyer", 10_000)
        with pytest.raises(ValidationError):
            await ledger.lock(None, wallet.id, amount, "o-1")
