from game.logic.enums import MoveOutcome
from game.logic.events import (
    BoardUpdateEvent,
    EventType,
    GameEndEvent,
    GameStartEvent,
    PlayerLeftEvent,
    PlayerMoveEvent,
    ScoreUpdateEvent,
    broadcast,
    to_player,
)
from game.logic.types import PlayerStanding, Position
from game.messaging.event_payload import EVENT_MESSAGE_TYPE, service_event_payload
from game.tests.helpers.board import make_grid


class TestEventMessageTypeExhaustiveness:
    def test_every_event_type_has_a_wire_type(self):
        assert set(EVENT_MESSAGE_TYPE) == set(EventType)


class TestServiceEventPayload:
    def test_game_start(self):
        event = to_player(
            "p1",
            GameStartEvent(
                players=[PlayerStanding(id="p1", name="Alice", score=0)],
                end_time=1_300_000,
                grid=make_grid("RB", "GY"),
            ),
        )
        assert service_event_payload(event) == {
            "type": "gameStart",
            "players": [{"id": "p1", "name": "Alice", "score": 0}],
            "endTime": 1_300_000,
            "grid": [["red", "blue"], ["green", "yellow"]],
        }

    def test_player_move_uses_from_and_to(self):
        event = broadcast(
            PlayerMoveEvent(player_id="p1", source=Position(row=0, col=0), target=Position(row=1, col=0)),
        )
        assert service_event_payload(event) == {
            "type": "playerMove",
            "playerId": "p1",
            "from": {"row": 0, "col": 0},
            "to": {"row": 1, "col": 0},
        }

    def test_board_update(self):
        event = to_player(
            "p1",
            BoardUpdateEvent(grid=make_grid("PO", "RB"), outcome=MoveOutcome.MATCHED, score_delta=50, cascades=2),
        )
        assert service_event_payload(event) == {
            "type": "boardUpdate",
            "grid": [["purple", "orange"], ["red", "blue"]],
            "outcome": "matched",
            "scoreDelta": 50,
            "cascades": 2,
        }

    def test_score_update(self):
        payload = service_event_payload(broadcast(ScoreUpdateEvent(player_id="p2", score=120)))
        assert payload == {"type": "scoreUpdate", "playerId": "p2", "score": 120}

    def test_player_left(self):
        payload = service_event_payload(broadcast(PlayerLeftEvent(player_id="p2", name="Bob")))
        assert payload == {"type": "playerLeft", "playerId": "p2", "name": "Bob"}

    def test_game_end_keeps_rank_order(self):
        scores = [
            PlayerStanding(id="p2", name="Bob", score=90),
            PlayerStanding(id="p1", name="Alice", score=30),
        ]
        payload = service_event_payload(broadcast(GameEndEvent(scores=scores)))
        assert payload == {
            "type": "gameEnd",
            "scores": [
                {"id": "p2", "name": "Bob", "score": 90},
                {"id": "p1", "name": "Alice", "score": 30},
            ],
        }
