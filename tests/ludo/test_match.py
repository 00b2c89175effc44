"""Unit tests for /src/ludo/match.py"""

import pytest

from src.core.exceptions import GameStateError
from src.core.models import MatchModel
from src.core.shared_types import FinishRule, Phase, PlayerColor, Status
from src.ludo.board import BASE, HOME
from src.ludo.match import Match


@pytest.fixture
def lobby() -> Match:
    """Fresh match, only the host is seated."""
    return Match.new_match(host_id="host", host_name="Host", avatar_ref="host.svg")


# -- CREATION LOGIC --
def test_new_match(lobby: Match) -> None:
    assert lobby.status == Status.WAITING_FOR_PLAYERS
    assert len(lobby.players) == 1
    assert lobby.host.id == "host"
    assert lobby.host.color == PlayerColor.RED
    assert lobby.host.avatar_ref == "host.svg"
    assert lobby.history == []
    assert lobby.turn_token == 0
    assert all(pawn.location == BASE for pawn in lobby.pawns())


def test_new_match_finish_rule() -> None:
    match = Match.new_match("host", "Host", finish_rule=FinishRule.EXACT)
    assert match.finish_rule == FinishRule.EXACT


def test_model_roundtrip(started_match: Match) -> None:
    """Create a Match, convert into MatchModel and back"""
    started_match.players[1].pawns[2].location = 30
    started_match.players[2].rank = 1
    started_match.dice_value = 4
    started_match.phase = Phase.AWAITING_MOVE
    started_match.legal_moves = ["red-0"]
    started_match.history.append({"event": "dice_rolled", "value": 4, "playerIndex": 0})

    model = started_match.to_model()
    assert isinstance(model, MatchModel)
    assert model.status == "in progress"
    assert model.phase == "awaiting move"
    assert Match.from_model(model) == started_match


def test_invalid_model() -> None:
    """The model comes from storage: a status we do not know is a corrupt record"""
    model = Match.new_match("host", "Host").to_model()
    model.status = "paused"
    with pytest.raises(GameStateError):
        Match.from_model(model)


# -- LOBBY --
def test_players_are_seated_in_color_order(lobby: Match) -> None:
    green = lobby.register_player("p2", "Two")
    yellow = lobby.register_player("p3", "Three")
    blue = lobby.register_player("p4", "Four")
    assert [green.color, yellow.color, blue.color] == [
        PlayerColor.GREEN,
        PlayerColor.YELLOW,
        PlayerColor.BLUE,
    ]
    assert [player.id for player in lobby.players] == ["host", "p2", "p3", "p4"]


def test_rejoining_keeps_the_seat(lobby: Match) -> None:
    first = lobby.register_player("p2", "Two")
    again = lobby.register_player("p2", "Two")
    assert again is first
    assert len(lobby.players) == 2


def test_match_is_full(lobby: Match) -> None:
    for index in range(2, 5):
        lobby.register_player(f"p{index}", f"Player {index}")
    with pytest.raises(GameStateError):
        lobby.register_player("p5", "One too many")


def test_cannot_join_started_match(started_match: Match) -> None:
    with pytest.raises(GameStateError):
        started_match.register_player("late", "Late")


def test_start_with_bots(lobby: Match) -> None:
    lobby.register_player("p2", "Two")
    lobby.start(requested_by="host", fill_with_bots=True)

    assert lobby.status == Status.IN_PROGRESS
    assert lobby.phase == Phase.AWAITING_ROLL
    assert lobby.turn_index == 0
    assert [player.is_bot for player in lobby.players] == [False, False, True, True]
    assert [player.color for player in lobby.players] == list(PlayerColor)


def test_start_without_bots_needs_four_players(lobby: Match) -> None:
    lobby.register_player("p2", "Two")
    with pytest.raises(GameStateError):
        lobby.start(requested_by="host")

    lobby.register_player("p3", "Three")
    lobby.register_player("p4", "Four")
    lobby.start(requested_by="host")
    assert lobby.status == Status.IN_PROGRESS
    assert not any(player.is_bot for player in lobby.players)


def test_only_host_starts(lobby: Match) -> None:
    lobby.register_player("p2", "Two")
    with pytest.raises(GameStateError):
        lobby.start(requested_by="p2", fill_with_bots=True)


def test_cannot_start_twice(started_match: Match) -> None:
    with pytest.raises(GameStateError):
        started_match.start(requested_by="p1", fill_with_bots=True)


# -- QUERIES --
def test_seat_of(started_match: Match) -> None:
    assert started_match.seat_of("p1") == 0
    assert started_match.seat_of("bot-blue") == 3
    assert started_match.seat_of("nobody") is None


def test_find_pawn(started_match: Match) -> None:
    found = started_match.find_pawn("yellow-3")
    assert found is not None
    seat, pawn = found
    assert seat == 2
    assert pawn.slot_index == 3
    assert started_match.find_pawn("purple-0") is None


def test_standings(started_match: Match) -> None:
    started_match.players[2].rank = 1
    started_match.players[0].rank = 2
    for pawn in started_match.players[2].pawns + started_match.players[0].pawns:
        pawn.location = HOME
    assert [player.color for player in started_match.standings()] == [
        PlayerColor.YELLOW,
        PlayerColor.RED,
        PlayerColor.GREEN,
        PlayerColor.BLUE,
    ]
    assert started_match.ranked_count() == 2
