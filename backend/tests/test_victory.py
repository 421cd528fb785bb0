from railbot.ai import victory
from railbot.ai.victory import check_victory_conditions, connected_major_cities
from railbot.config import settings
from railbot.models.board import TerrainType
from railbot.models.game import TrackPoint, TrackSegment
from railbot.services.board_loader import BUILTIN_BOARD_PATH, load_board_catalog

FULL_LINE = [(2, 3), (2, 4), (2, 5), (2, 6), (2, 7), (2, 8)]


def test_connected_major_cities_follows_network(board, make_track):
    assert connected_major_cities(make_track(FULL_LINE), board) == ["Alpha", "Beta"]
    assert connected_major_cities((), board) == []


def test_victory_requires_enough_major_cities(board, make_track):
    result = check_victory_conditions(500, make_track(FULL_LINE), board, threshold=250)

    assert result.eligible is False
    assert result.connected_cities == ["Alpha", "Beta"]


def test_victory_when_cash_and_cities_met(board, make_track, monkeypatch):
    monkeypatch.setattr(victory, "VICTORY_MAJOR_CITIES", 2)

    assert check_victory_conditions(250, make_track(FULL_LINE), board, threshold=250).eligible is True
    assert check_victory_conditions(249, make_track(FULL_LINE), board, threshold=250).eligible is False


def test_default_threshold_comes_from_settings(board, make_track, monkeypatch):
    monkeypatch.setattr(victory, "VICTORY_MAJOR_CITIES", 2)
    monkeypatch.setattr(settings, "victory_threshold", 100)

    assert check_victory_conditions(120, make_track(FULL_LINE), board).eligible is True


def _link_centers(board, groups):
    centers = [group.center for group in groups]
    return tuple(
        TrackSegment(
            from_=TrackPoint(row=a.row, col=a.col, x=a.x, y=a.y, terrain=TerrainType.MAJOR_CITY),
            to=TrackPoint(row=b.row, col=b.col, x=b.x, y=b.y, terrain=TerrainType.MAJOR_CITY),
            cost=1,
        )
        for a, b in zip(centers, centers[1:])
    )


def test_seven_major_cities_on_builtin_board():
    board = load_board_catalog(BUILTIN_BOARD_PATH)
    all_seven = _link_centers(board, board.major_cities)

    short_of_cash = check_victory_conditions(200, all_seven, board, threshold=250)
    assert short_of_cash.eligible is False
    assert len(short_of_cash.connected_cities) == 7

    assert check_victory_conditions(250, all_seven, board, threshold=250).eligible is True

    six = check_victory_conditions(500, _link_centers(board, board.major_cities[:6]), board, threshold=250)
    assert six.eligible is False
    assert len(six.connected_cities) == 6
