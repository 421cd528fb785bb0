"""
胜利条件检查：现金达到门槛，且单一连通网络连接足够多的主要城市
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from railbot.ai.reachability import ReachabilityGraph
from railbot.ai.rules import VICTORY_MAJOR_CITIES
from railbot.config import settings
from railbot.models.board import BoardCatalog
from railbot.models.game import TrackSegment


class VictoryCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    eligible: bool
    connected_cities: List[str]


def connected_major_cities(segments: Iterable[TrackSegment], board: BoardCatalog) -> List[str]:
    """网络中城市最多的连通分量所连接的主要城市。"""
    return ReachabilityGraph.from_segments(segments, board).connected_major_cities()


def check_victory_conditions(
    money: int,
    segments: Iterable[TrackSegment],
    board: BoardCatalog,
    threshold: Optional[int] = None,
) -> VictoryCheck:
    """threshold 缺省时取配置中的现金门槛。"""
    threshold = settings.victory_threshold if threshold is None else threshold
    cities = connected_major_cities(segments, board)
    eligible = money >= threshold and len(cities) >= VICTORY_MAJOR_CITIES
    return VictoryCheck(eligible=eligible, connected_cities=cities)
