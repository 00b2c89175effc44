"""Unit tests for /src/ludo/pawn.py"""

import pytest

from src.core.shared_types import PlayerColor
from src.ludo.board import BASE, HOME
from src.ludo.pawn import Pawn, Player, pawn_id


@pytest.mark.parametrize("color", list(PlayerColor))
def test_new_player_has_four_pawns_in_base(color: PlayerColor) -> None:
    player = Player(id="p", name="name", color=color)
    assert [pawn.id for pawn in player.pawns] == [f"{color.value}-{slot}" for slot in range(4)]
    assert [pawn.slot_index for pawn in player.pawns] == [0, 1, 2, 3]
    assert all(pawn.location == BASE for pawn in player.pawns)
    assert all(pawn.color == color for pawn in player.pawns)
    assert player.rank is None


def test_pawn_id_format() -> None:
    assert pawn_id(PlayerColor.GREEN, 2) == "green-2"


def test_bot_player() -> None:
    bot = Player.bot(PlayerColor.YELLOW)
    assert bot.is_bot
    assert bot.name == "Bot Yellow"
    assert bot.id == "bot-yellow"
    assert len(bot.pawns) == 4


def test_captured_pawn_keeps_its_slot() -> None:
    """Slots are never reassigned: the pawn goes back to the same base position"""
    pawn = Pawn.in_base(PlayerColor.BLUE, 3)
    base_coordinate = pawn.coordinate()
    pawn.location = 20
    assert pawn.coordinate() != base_coordinate

    pawn.send_to_base()
    assert pawn.is_in_base
    assert pawn.slot_index == 3
    assert pawn.coordinate() == base_coordinate


def test_has_finished() -> None:
    player = Player(id="p", name="name", color=PlayerColor.RED)
    for pawn in player.pawns[:3]:
        pawn.location = HOME
    assert not player.has_finished
    player.pawns[3].location = HOME
    assert player.has_finished


def test_find_pawn() -> None:
    player = Player(id="p", name="name", color=PlayerColor.RED)
    pawn = player.pawn("red-1")
    assert pawn is not None
    assert pawn.slot_index == 1
    assert player.pawn("green-1") is None


def test_record_roundtrip() -> None:
    """Convert a player with pawns all over the board to a record and back"""
    player = Player(id="p7", name="Someone", color=PlayerColor.GREEN, avatar_ref="avatar.svg", rank=2)
    for pawn, location in zip(player.pawns, [BASE, 7, 53, HOME]):
        pawn.location = location

    restored = Player.from_record(player.to_record())
    assert restored == player
