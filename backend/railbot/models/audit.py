"""
回合审计记录

每次回合尝试落一条 StrategyAudit，写入后不再修改。
"""
from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict

from railbot.models.game import TrainType
from railbot.models.options import ExecutionResult, FeasibleOption, InfeasibleOption, ScoredOption
from railbot.models.profiles import SkillLevel


class BotStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    cash: int = 0
    train_type: TrainType = TrainType.FREIGHT
    loads: Tuple[str, ...] = ()
    major_cities_connected: int = 0


class StrategyAudit(BaseModel):
    model_config = ConfigDict(frozen=True)

    turn_number: int
    archetype_id: str
    archetype_name: str
    skill_level: SkillLevel
    snapshot_hash: str = ""
    current_plan: str
    archetype_rationale: str
    feasible_options: Tuple[ScoredOption, ...] = ()
    rejected_options: Tuple[InfeasibleOption, ...] = ()
    selected_plan: Tuple[FeasibleOption, ...] = ()
    execution_result: ExecutionResult
    bot_status: BotStatus
    duration_ms: int = 0


class TurnResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    audit: StrategyAudit
    retries_used: int = 0
    fell_back_to_pass: bool = False
