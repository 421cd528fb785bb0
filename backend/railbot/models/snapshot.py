"""
WorldSnapshot：单个 bot 回合决策所需的全部只读世界状态

不可变约束:
  - 所有模型 frozen=True，字段赋值直接抛出 ValidationError
  - 列表字段全部是 tuple
  - 映射字段在校验后包装为 MappingProxyType，写入抛出 TypeError
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from railbot.models.board import BoardCatalog, Point
from railbot.models.game import DemandCard, PlayerTrackState, TrackSegment, TrainType

GamePhase = Literal["initialBuild", "active"]


class OpponentSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    name: str = ""
    money: int = 0
    train_type: TrainType = TrainType.FREIGHT
    position: Optional[Point] = None
    loads: Tuple[str, ...] = ()
    track_segment_count: int = 0
    major_cities_connected: int = 0


class WorldSnapshot(BaseModel):
    """某一时刻的世界快照。每次回合尝试创建一次，用完即弃。"""

    model_config = ConfigDict(frozen=True)

    game_id: str
    bot_player_id: str
    bot_user_id: str
    game_phase: GamePhase = "active"
    turn_build_cost_so_far: int = 0

    # ===== Bot 自身状态 =====
    position: Optional[Point] = None
    money: int = 0
    debt_owed: int = 0
    train_type: TrainType = TrainType.FREIGHT
    remaining_movement: int = 0
    carried_loads: Tuple[str, ...] = ()
    demand_cards: Tuple[DemandCard, ...] = ()

    # ===== Bot 轨道网络 =====
    track_segments: Tuple[TrackSegment, ...] = ()
    connected_major_cities: int = 0

    # ===== 对手 / 全局 =====
    opponents: Tuple[OpponentSummary, ...] = ()
    all_player_tracks: Tuple[PlayerTrackState, ...] = ()
    load_availability: Mapping[str, Tuple[str, ...]] = Field(default_factory=dict)
    dropped_loads: Mapping[str, Tuple[str, ...]] = Field(default_factory=dict)
    board: BoardCatalog = Field(default_factory=BoardCatalog)

    # 事件系统占位
    active_events: Tuple[str, ...] = ()

    @field_validator("load_availability", "dropped_loads", mode="after")
    @classmethod
    def _freeze_mapping(cls, value: Mapping[str, Tuple[str, ...]]) -> Mapping[str, Tuple[str, ...]]:
        return MappingProxyType(dict(value))

    @field_serializer("load_availability", "dropped_loads")
    def _serialize_mapping(self, value: Mapping[str, Tuple[str, ...]]) -> Dict[str, Any]:
        return {city: list(loads) for city, loads in value.items()}
