"""Tests for the in-memory fungible token backend."""

import pytest

from src.pm_common.errors import ExternalTransferError
from src.pm_token.infrastructure.memory import InMemoryToken


@pytest.fixture
def token() -> InMemoryToken:
    t = InMemoryToken("USDC")
    t.mint("alice", 100)
    return t


class TestMintBurn:
    def test_mint_tracks_supply(self, token: InMemoryToken) -> None:
        assert token.balance_of("alice") == 100
        assert token.total_supply == 100

    def test_burn(self, token: InMemoryToken) -> None:
        token.burn("alice", 30)
        assert token.balance_of("alice") == 70
        assert token.total_supply == 70

    def test_burn_more_than_held(self, token: InMemoryToken) -> None:
        with pytest.raises(ExternalTransferError) as exc:
            token.burn("alice", 101)
        assert exc.value.operation == "burn"
        assert token.balance_of("alice") == 100

    def test_negative_amount(self, token: InMemoryToken) -> None:
        with pytest.raises(ExternalTransferError):
            token.mint("alice", -1)


class TestTransfer:
    def test_transfer(self, token: InMemoryToken) -> None:
        token.transfer("alice", "bob", 40)
        assert token.balance_of("alice") == 60
        assert token.balance_of("bob") == 40
        assert token.total_supply == 100

    def test_insufficient_balance_changes_nothing(self, token: InMemoryToken) -> None:
        with pytest.raises(ExternalTransferError):
            token.transfer("bob", "alice", 1)
        assert token.balance_of("alice") == 100
        assert token.balance_of("bob") == 0


class TestAllowance:
    def test_transfer_from_spends_allowance(self, token: InMemoryToken) -> None:
        token.approve("alice", "market", 50)
        token.transfer_from("market", "alice", "pool", 20)
        assert token.allowance("alice", "market") == 30
        assert token.balance_of("pool") == 20

    def test_transfer_from_without_allowance(self, token: InMemoryToken) -> None:
        with pytest.raises(ExternalTransferError) as exc:
            token.transfer_from("market", "alice", "pool", 1)
        assert exc.value.operation == "transferFrom"
        assert token.balance_of("alice") == 100

    def test_allowance_kept_when_balance_short(self, token: InMemoryToken) -> None:
        token.approve("alice", "market", 500)
        with pytest.raises(ExternalTransferError):
            token.transfer_from("market", "alice", "pool", 200)
        assert token.allowance("alice", "market") == 500


class TestRestore:
    def test_restore_sets_balance_and_supply(self, token: InMemoryToken) -> None:
        token.restore_balance("pool", 30)
        token.restore_balance("alice", 60)
        assert token.balance_of("pool") == 30
        assert token.balance_of("alice") == 60
        assert token.total_supply == 90

    def test_restore_rejects_negative(self, token: InMemoryToken) -> None:
        with pytest.raises(ExternalTransferError):
            token.restore_balance("alice", -1)
        assert token.balance_of("alice") == 100
