"""
数据模型包
"""

from .board import (
    BoardCatalog,
    CityInfo,
    Coord,
    FerryEdge,
    GridPoint,
    MajorCityGroup,
    Point,
    TerrainType,
)
from .game import (
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
from .options import (
    ActionType,
    BuildTowardMajorCityParams,
    BuildTrackParams,
    DeliverLoadParams,
    ExecutionResult,
    FeasibleOption,
    GenerationResult,
    InfeasibleOption,
    PassTurnParams,
    PickupAndDeliverParams,
    ScoredOption,
    TurnPlan,
    UpgradeTrainParams,
    ValidationResult,
    pass_turn_option,
)
from .profiles import ALL_DIMENSIONS, ArchetypeProfile, BotConfig, DimensionWeights, SkillProfile
from .snapshot import OpponentSummary, WorldSnapshot
from .audit import BotStatus, StrategyAudit, TurnResult

__all__ = [
    "BoardCatalog",
    "CityInfo",
    "Coord",
    "FerryEdge",
    "GridPoint",
    "MajorCityGroup",
    "Point",
    "TerrainType",
    "Demand",
    "DemandCard",
    "DroppedLoad",
    "GameRecord",
    "PlayerRecord",
    "PlayerTrackState",
    "TrackPoint",
    "TrackSegment",
    "TrainState",
    "TrainType",
    "ActionType",
    "BuildTowardMajorCityParams",
    "BuildTrackParams",
    "DeliverLoadParams",
    "ExecutionResult",
    "FeasibleOption",
    "GenerationResult",
    "InfeasibleOption",
    "PassTurnParams",
    "PickupAndDeliverParams",
    "ScoredOption",
    "TurnPlan",
    "UpgradeTrainParams",
    "ValidationResult",
    "pass_turn_option",
    "ALL_DIMENSIONS",
    "ArchetypeProfile",
    "BotConfig",
    "DimensionWeights",
    "SkillProfile",
    "OpponentSummary",
    "WorldSnapshot",
    "BotStatus",
    "StrategyAudit",
    "TurnResult",
]
