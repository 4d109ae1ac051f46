"""
Tests for bet placement and history.
"""
import pytest

from database import BetStatus
from game import (
    BetService,
    NonceError,
    NonceRegistry,
    NotFoundError,
    OwnershipError,
    ValidationError,
    game_exists,
    get_games_by_category,
    list_games,
)


class SpyRegistry(NonceRegistry):
    """Registry that records every issue/consume call."""

    def __init__(self):
        super().__init__(ttl_seconds=300)
        self.calls = []

    def issue(self):
        self.calls.append("issue")
        return super().issue()

    def consume(self, value):
        self.calls.append("consume")
        return super().consume(value)


@pytest.fixture
def spy():
    return SpyRegistry()


@pytest.fixture
def spied_service(db, spy):
    return BetService(db, spy)


def test_place_bet_consumes_supplied_nonce(bet_service, registry, user, db):
    nonce = registry.issue().value
    bet, game = bet_service.place_bet(user.user_id, "028", 50, "my-seed", nonce=nonce)

    assert bet.status == BetStatus.PENDING
    assert bet.nonce == nonce
    assert bet.outcome is None and bet.win_amount is None and bet.settled_at is None
    assert game.name == "Dice Roll"
    assert not registry.validate(nonce)
    assert db.get_bet(bet.bet_id) == bet


def test_nonce_cannot_back_two_bets(bet_service, registry, user):
    nonce = registry.issue().value
    bet_service.place_bet(user.user_id, "028", 50, "my-seed", nonce=nonce)

    with pytest.raises(NonceError):
        bet_service.place_bet(user.user_id, "028", 50, "my-seed", nonce=nonce)


def test_place_bet_without_nonce_issues_one(bet_service, registry, user):
    bet, _ = bet_service.place_bet(user.user_id, "028", 50, "my-seed")
    assert len(bet.nonce) == 64
    assert len(registry) == 0


def test_unknown_nonce_rejected(bet_service, user):
    with pytest.raises(NonceError):
        bet_service.place_bet(user.user_id, "028", 50, "my-seed", nonce="c" * 64)


def test_malformed_nonce_rejected(bet_service, user):
    with pytest.raises(NonceError):
        bet_service.place_bet(user.user_id, "028", 50, "my-seed", nonce="not-a-nonce")


def test_below_min_bet_rejected_before_any_nonce_work(spied_service, spy, user):
    nonce = spy.issue().value
    spy.calls.clear()

    with pytest.raises(ValidationError, match="Minimum bet"):
        spied_service.place_bet(user.user_id, "047", 50, "my-seed", nonce=nonce)

    assert spy.calls == []
    assert spy.validate(nonce)


def test_above_max_bet_rejected(spied_service, spy, user):
    with pytest.raises(ValidationError, match="Maximum bet"):
        spied_service.place_bet(user.user_id, "028", 100.01, "my-seed")
    assert spy.calls == []


def test_limits_are_inclusive(bet_service, user):
    bet_service.place_bet(user.user_id, "028", 0.01, "my-seed")
    bet_service.place_bet(user.user_id, "028", 100, "my-seed")


def test_unknown_game(spied_service, spy, user):
    with pytest.raises(NotFoundError):
        spied_service.place_bet(user.user_id, "999", 10, "my-seed")
    assert spy.calls == []


@pytest.mark.parametrize("amount", [0, -5, float("nan"), float("inf"), True])
def test_bad_amounts(bet_service, user, amount):
    with pytest.raises(ValidationError):
        bet_service.place_bet(user.user_id, "028", amount, "my-seed")


@pytest.mark.parametrize("seed", ["", " padded ", "line\nbreak", "x" * 129])
def test_bad_client_seeds(bet_service, user, seed):
    with pytest.raises(ValidationError):
        bet_service.place_bet(user.user_id, "028", 10, seed)


def test_get_bet_checks_owner(bet_service, user, other_user):
    bet, _ = bet_service.place_bet(user.user_id, "028", 10, "my-seed")

    assert bet_service.get_bet(bet.bet_id, user.user_id) == bet
    with pytest.raises(OwnershipError):
        bet_service.get_bet(bet.bet_id, other_user.user_id)
    with pytest.raises(NotFoundError):
        bet_service.get_bet("bet_missing", user.user_id)


def test_list_bets_paginates_and_filters(bet_service, engine, user, other_user):
    placed = [bet_service.place_bet(user.user_id, "028", 1 + i, f"seed-{i}")[0] for i in range(5)]
    bet_service.place_bet(other_user.user_id, "028", 1, "theirs")
    engine.settle(placed[0].bet_id, user.user_id)

    page, total = bet_service.list_bets(user.user_id, limit=2, offset=0)
    assert total == 5
    assert [b.bet_id for b in page] == [placed[4].bet_id, placed[3].bet_id]

    page, _ = bet_service.list_bets(user.user_id, limit=2, offset=4)
    assert [b.bet_id for b in page] == [placed[0].bet_id]

    settled, total = bet_service.list_bets(user.user_id, status="settled")
    assert total == 1
    assert settled[0].status == BetStatus.SETTLED

    pending, total = bet_service.list_bets(user.user_id, status="PENDING")
    assert total == 4


@pytest.mark.parametrize("kwargs", [
    {"status": "LOST"},
    {"limit": 0},
    {"limit": 101},
    {"offset": -1},
])
def test_list_bets_rejects_bad_filters(bet_service, user, kwargs):
    with pytest.raises(ValidationError):
        bet_service.list_bets(user.user_id, **kwargs)


def test_catalog():
    games = list_games()
    assert len(games) == 47
    assert len({g.game_id for g in games}) == 47
    assert all(0 < g.rtp <= 1 and 0 < g.min_bet <= g.max_bet for g in games)
    assert len(get_games_by_category("slots")) == 10
    assert len(get_games_by_category("live")) == 10
    assert game_exists("001")
    assert not game_exists("048")
