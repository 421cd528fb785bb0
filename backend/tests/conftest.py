"""
共享测试夹具

测试地图（6 行 × 12 列，偏移六边形坐标）:
  - Alpha: 主要城市，中心 (2,2)
  - Beta:  主要城市，中心 (2,9)
  - Cork:  小城市 (0,5)
  - Dune:  中等城市 (4,5)
  - (2,5) 山地；第 5 行全是水域
  - 渡轮 Strait: (4,11) <-> (0,11)，造价 6
"""
from typing import Iterable, List

import pytest

from railbot.ai.build_planner import hex_neighbors
from railbot.ai.rules import TERRAIN_COSTS
from railbot.models.board import BoardCatalog, Coord
from railbot.models.game import (
    Demand,
    DemandCard,
    DroppedLoad,
    GameRecord,
    PlayerRecord,
    PlayerTrackState,
    TrackPoint,
    TrackSegment,
    TrainState,
    TrainType,
)
from railbot.models.snapshot import WorldSnapshot
from railbot.services.board_loader import board_from_records
from railbot.services.memory_gateway import InMemoryGameGateway

GAME_ID = "g1"
BOT_ID = "bot1"
BOT_USER = "u-bot"
OPPONENT_ID = "p2"
OPPONENT_USER = "u-2"

ROWS = 6
COLS = 12


def _test_board_records():
    special = {}
    special[(2, 2)] = ("Major City", "Alpha")
    for coord in hex_neighbors(2, 2):
        special[coord] = ("Major City Outpost", "Alpha")
    special[(2, 9)] = ("Major City", "Beta")
    for coord in hex_neighbors(2, 9):
        special[coord] = ("Major City Outpost", "Beta")
    special[(0, 5)] = ("Small City", "Cork")
    special[(4, 5)] = ("Medium City", "Dune")
    special[(2, 5)] = ("Mountain", None)
    special[(4, 11)] = ("Ferry Port", None)
    special[(0, 11)] = ("Ferry Port", None)
    for col in range(COLS):
        special[(ROWS - 1, col)] = ("Water", None)

    mileposts = []
    for row in range(ROWS):
        for col in range(COLS):
            kind, name = special.get((row, col), ("Clear", None))
            mileposts.append(
                {"Id": f"p_{row}_{col}", "Type": kind, "Name": name, "GridX": col, "GridY": row}
            )
    ferries = [{"Name": "Strait", "connections": ["p_4_11", "p_0_11"], "cost": 6}]
    return mileposts, ferries


@pytest.fixture(scope="session")
def board() -> BoardCatalog:
    mileposts, ferries = _test_board_records()
    return board_from_records(mileposts, ferries)


@pytest.fixture
def make_track(board):
    """按坐标序列生成相邻轨道段，造价取目标点地形价。"""

    def _make(coords: Iterable[Coord]) -> tuple:
        coords = list(coords)
        segments: List[TrackSegment] = []
        for a, b in zip(coords, coords[1:]):
            pa, pb = board.point_at(*a), board.point_at(*b)
            segments.append(
                TrackSegment(
                    from_=TrackPoint(row=pa.row, col=pa.col, x=pa.x, y=pa.y, terrain=pa.terrain),
                    to=TrackPoint(row=pb.row, col=pb.col, x=pb.x, y=pb.y, terrain=pb.terrain),
                    cost=TERRAIN_COSTS[pb.terrain],
                )
            )
        return tuple(segments)

    return _make


@pytest.fixture
def point(board):
    def _point(row: int, col: int):
        return board.point_at(row, col).to_point()

    return _point


def _demand_cards():
    return [
        DemandCard(
            id=1,
            demands=(
                Demand(city="Dune", resource="Coal", payment=12),
                Demand(city="Beta", resource="Wine", payment=30),
                Demand(city="Cork", resource="Fish", payment=8),
            ),
        ),
        DemandCard(
            id=2,
            demands=(
                Demand(city="Beta", resource="Coal", payment=25),
                Demand(city="Cork", resource="Oil", payment=10),
                Demand(city="Dune", resource="Iron", payment=6),
            ),
        ),
    ]


@pytest.fixture
def demand_cards():
    return tuple(_demand_cards())


# 默认局面: bot 从 Alpha 外围 (2,3) 向东修到 (2,6)，对手从 (2,6) 修到 Beta (2,8)
BOT_TRACK_COORDS = [(2, 3), (2, 4), (2, 5), (2, 6)]
OPPONENT_TRACK_COORDS = [(2, 6), (2, 7), (2, 8)]


@pytest.fixture
def make_snapshot(board, make_track, point, demand_cards):
    """直接构造 WorldSnapshot；关键字参数覆盖默认局面。"""

    def _make(**overrides) -> WorldSnapshot:
        bot_segments = overrides.pop("track_segments", make_track(BOT_TRACK_COORDS))
        opponent_segments = overrides.pop("opponent_segments", make_track(OPPONENT_TRACK_COORDS))
        fields = dict(
            game_id=GAME_ID,
            bot_player_id=BOT_ID,
            bot_user_id=BOT_USER,
            game_phase="active",
            position=point(2, 3),
            money=50,
            train_type=TrainType.FREIGHT,
            remaining_movement=9,
            carried_loads=("Coal",),
            demand_cards=demand_cards,
            track_segments=bot_segments,
            connected_major_cities=1,
            all_player_tracks=(
                PlayerTrackState(player_id=BOT_ID, game_id=GAME_ID, segments=bot_segments),
                PlayerTrackState(player_id=OPPONENT_ID, game_id=GAME_ID, segments=opponent_segments),
            ),
            load_availability={"Cork": ("Fish", "Oil")},
            dropped_loads={"Dune": ("Wine",)},
            board=board,
        )
        fields.update(overrides)
        return WorldSnapshot(**fields)

    return _make


@pytest.fixture
def gateway(make_track, point) -> InMemoryGameGateway:
    """与 make_snapshot 默认局面一致的内存游戏状态。"""
    gw = InMemoryGameGateway()
    gw.add_game(
        GameRecord(
            id=GAME_ID,
            status="active",
            players=[
                PlayerRecord(
                    id=BOT_ID,
                    user_id=BOT_USER,
                    name="Bot",
                    money=50,
                    train_type=TrainType.FREIGHT,
                    train_state=TrainState(position=point(2, 3), remaining_movement=9, loads=["Coal"]),
                    hand=_demand_cards(),
                    is_bot=True,
                ),
                PlayerRecord(
                    id=OPPONENT_ID,
                    user_id=OPPONENT_USER,
                    name="Human",
                    money=40,
                    train_state=TrainState(position=point(2, 8), remaining_movement=9),
                ),
            ],
        )
    )
    gw.set_track_state(
        PlayerTrackState(player_id=BOT_ID, game_id=GAME_ID, segments=make_track(BOT_TRACK_COORDS), total_cost=8)
    )
    gw.set_track_state(
        PlayerTrackState(player_id=OPPONENT_ID, game_id=GAME_ID, segments=make_track(OPPONENT_TRACK_COORDS))
    )
    gw.set_city_loads("Cork", ["Fish", "Oil"])
    gw.add_dropped_load(GAME_ID, DroppedLoad(city_name="Dune", type="Wine"))
    return gw
