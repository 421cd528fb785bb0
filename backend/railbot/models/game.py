"""
游戏状态数据模型（协作方读写契约中使用的记录）
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from railbot.models.board import Point, TerrainType


class TrainType(str, Enum):
    """列车类型"""

    FREIGHT = "freight"
    FAST_FREIGHT = "fast_freight"
    HEAVY_FREIGHT = "heavy_freight"
    SUPERFREIGHT = "superfreight"


class TrackPoint(Point):
    terrain: TerrainType = TerrainType.CLEAR


class TrackSegment(BaseModel):
    """一段已建（或计划建造）的轨道。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: TrackPoint = Field(alias="from")
    to: TrackPoint
    cost: int = 0


class PlayerTrackState(BaseModel):
    """某玩家在某局中的轨道记录。"""

    model_config = ConfigDict(frozen=True)

    player_id: str
    game_id: str = ""
    segments: Tuple[TrackSegment, ...] = ()
    total_cost: int = 0
    turn_build_cost: int = 0


class Demand(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str
    resource: str
    payment: int


class DemandCard(BaseModel):
    """需求卡：三条需求，只能兑现其中一条。"""

    model_config = ConfigDict(frozen=True)

    id: int
    demands: Tuple[Demand, ...] = ()


class TrainState(BaseModel):
    position: Optional[Point] = None
    remaining_movement: int = 0
    loads: List[str] = Field(default_factory=list)


class PlayerRecord(BaseModel):
    id: str
    user_id: str
    name: str = ""
    money: int = 0
    debt_owed: int = 0
    train_type: TrainType = TrainType.FREIGHT
    train_state: Optional[TrainState] = None
    hand: List[DemandCard] = Field(default_factory=list)
    is_bot: bool = False


class GameRecord(BaseModel):
    id: str
    # setup | initialBuild | active | completed
    status: str = "active"
    players: List[PlayerRecord] = Field(default_factory=list)


class DroppedLoad(BaseModel):
    model_config = ConfigDict(frozen=True)

    city_name: str
    type: str
