"""
候选行动数据模型

FeasibleOption / InfeasibleOption 是真正的和类型：
- FeasibleOption 携带按 ActionType 区分的执行参数（discriminated union）
- InfeasibleOption 只携带非空的拒绝原因
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from railbot.models.board import Point
from railbot.models.game import TrackSegment, TrainType


class ActionType(str, Enum):
    """Bot 行动类型"""

    DELIVER_LOAD = "DeliverLoad"
    PICKUP_AND_DELIVER = "PickupAndDeliver"
    BUILD_TRACK = "BuildTrack"
    UPGRADE_TRAIN = "UpgradeTrain"
    BUILD_TOWARD_MAJOR_CITY = "BuildTowardMajorCity"
    PASS_TURN = "PassTurn"


# =============================================================================
# 行动参数
# =============================================================================


class _Params(BaseModel):
    model_config = ConfigDict(frozen=True)


class DeliverLoadParams(_Params):
    type: Literal["DeliverLoad"] = "DeliverLoad"
    move_path: Tuple[Point, ...] = ()
    demand_card_id: int
    demand_index: int
    load_type: str
    city: str


class PickupAndDeliverParams(_Params):
    type: Literal["PickupAndDeliver"] = "PickupAndDeliver"
    pickup_path: Tuple[Point, ...] = ()
    pickup_city: str
    pickup_load_type: str
    # 空路径 = 本回合只取货，送货留给后续回合
    deliver_path: Tuple[Point, ...] = ()
    deliver_city: str
    demand_card_id: int
    demand_index: int


class BuildTrackParams(_Params):
    type: Literal["BuildTrack"] = "BuildTrack"
    segments: Tuple[TrackSegment, ...] = ()
    total_cost: int = 0


class BuildTowardMajorCityParams(_Params):
    type: Literal["BuildTowardMajorCity"] = "BuildTowardMajorCity"
    target_city: str = ""
    segments: Tuple[TrackSegment, ...] = ()
    total_cost: int = 0


class UpgradeTrainParams(_Params):
    type: Literal["UpgradeTrain"] = "UpgradeTrain"
    target_train_type: TrainType
    kind: Literal["upgrade", "crossgrade"]
    cost: int


class PassTurnParams(_Params):
    type: Literal["PassTurn"] = "PassTurn"


ActionParams = Annotated[
    Union[
        DeliverLoadParams,
        PickupAndDeliverParams,
        BuildTrackParams,
        BuildTowardMajorCityParams,
        UpgradeTrainParams,
        PassTurnParams,
    ],
    Field(discriminator="type"),
]


# =============================================================================
# 候选项
# =============================================================================


class FeasibleOption(BaseModel):
    """可行候选：附带 TurnExecutor 需要的参数。"""

    model_config = ConfigDict(frozen=True)

    feasible: Literal[True] = True
    type: ActionType
    description: str
    params: ActionParams

    @model_validator(mode="after")
    def _params_match_type(self) -> "FeasibleOption":
        if self.params.type != self.type.value:
            raise ValueError(f"params type {self.params.type} does not match action type {self.type.value}")
        return self


class InfeasibleOption(BaseModel):
    """不可行候选：只用于审计展示。"""

    model_config = ConfigDict(frozen=True)

    feasible: Literal[False] = False
    type: ActionType
    description: str
    reason: str = Field(min_length=1)


class ScoredOption(FeasibleOption):
    score: float
    rationale: str


Option = Union[FeasibleOption, InfeasibleOption]


def pass_turn_option(description: str = "Pass turn - no action taken") -> FeasibleOption:
    return FeasibleOption(
        type=ActionType.PASS_TURN,
        description=description,
        params=PassTurnParams(),
    )


# =============================================================================
# 计划 / 校验 / 执行结果
# =============================================================================


class TurnPlan(BaseModel):
    """按顺序执行的行动列表（通常一个，偶尔是短链）。"""

    model_config = ConfigDict(frozen=True)

    actions: Tuple[FeasibleOption, ...] = ()


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    errors: Tuple[str, ...] = ()

    @computed_field  # type: ignore[misc]
    @property
    def valid(self) -> bool:
        return not self.errors


class ExecutionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    actions_executed: int = 0
    error: Optional[str] = None
    duration_ms: int = 0


class GenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    feasible: List[FeasibleOption] = Field(default_factory=list)
    infeasible: List[InfeasibleOption] = Field(default_factory=list)
