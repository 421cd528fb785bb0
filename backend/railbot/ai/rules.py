"""
规则常量：建造预算、地形造价、列车属性与升级路径
"""
from __future__ import annotations

from typing import Dict, NamedTuple, Tuple

from railbot.models.board import TerrainType
from railbot.models.game import TrainType

# 每回合建造上限（M ECU）
MAX_BUILD_PER_TURN = 20

UPGRADE_COST = 20
CROSSGRADE_COST = 5

# 使用对手轨道：每个对手每回合 4M
TRACK_USAGE_FEE = 4

VICTORY_MAJOR_CITIES = 7
DEFAULT_VICTORY_CASH = 250

TERRAIN_COSTS: Dict[TerrainType, int] = {
    TerrainType.CLEAR: 1,
    TerrainType.MOUNTAIN: 2,
    TerrainType.ALPINE: 5,
    TerrainType.SMALL_CITY: 3,
    TerrainType.MEDIUM_CITY: 3,
    TerrainType.MAJOR_CITY: 5,
    # 基础价；渡轮航线有自己的造价
    TerrainType.FERRY_PORT: 1,
    TerrainType.WATER: 0,
}


class TrainProperties(NamedTuple):
    speed: int
    capacity: int


TRAIN_PROPERTIES: Dict[TrainType, TrainProperties] = {
    TrainType.FREIGHT: TrainProperties(speed=9, capacity=2),
    TrainType.FAST_FREIGHT: TrainProperties(speed=12, capacity=2),
    TrainType.HEAVY_FREIGHT: TrainProperties(speed=9, capacity=3),
    TrainType.SUPERFREIGHT: TrainProperties(speed=12, capacity=3),
}


class UpgradePath(NamedTuple):
    target_train_type: TrainType
    kind: str
    cost: int


VALID_UPGRADES: Dict[TrainType, Tuple[UpgradePath, ...]] = {
    TrainType.FREIGHT: (
        UpgradePath(TrainType.FAST_FREIGHT, "upgrade", UPGRADE_COST),
        UpgradePath(TrainType.HEAVY_FREIGHT, "upgrade", UPGRADE_COST),
    ),
    TrainType.FAST_FREIGHT: (
        UpgradePath(TrainType.SUPERFREIGHT, "upgrade", UPGRADE_COST),
        UpgradePath(TrainType.HEAVY_FREIGHT, "crossgrade", CROSSGRADE_COST),
    ),
    TrainType.HEAVY_FREIGHT: (
        UpgradePath(TrainType.SUPERFREIGHT, "upgrade", UPGRADE_COST),
        UpgradePath(TrainType.FAST_FREIGHT, "crossgrade", CROSSGRADE_COST),
    ),
    TrainType.SUPERFREIGHT: (),
}


def train_capacity(train_type: TrainType) -> int:
    return TRAIN_PROPERTIES[TrainType(train_type)].capacity


def train_speed(train_type: TrainType) -> int:
    return TRAIN_PROPERTIES[TrainType(train_type)].speed


def find_upgrade(current: TrainType, target: TrainType) -> UpgradePath | None:
    for path in VALID_UPGRADES[TrainType(current)]:
        if path.target_train_type == target:
            return path
    return None
