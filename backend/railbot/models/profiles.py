"""
Bot 配置模型：技能档位、性格原型、12 维评分权重
"""
from __future__ import annotations

from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict

SkillLevel = Literal["easy", "medium", "hard"]

ArchetypeId = Literal[
    "backbone_builder",
    "freight_optimizer",
    "trunk_sprinter",
    "continental_connector",
    "opportunist",
]


class DimensionWeights(BaseModel):
    """12 个评分维度上的数值（权重、倍率或维度取值通用）。"""

    model_config = ConfigDict(frozen=True)

    immediate_income: float = 0.0
    income_per_milepost: float = 0.0
    multi_delivery_potential: float = 0.0
    network_expansion_value: float = 0.0
    victory_progress: float = 0.0
    competitor_blocking: float = 0.0
    risk_exposure: float = 0.0
    load_scarcity: float = 0.0
    upgrade_roi: float = 0.0
    backbone_alignment: float = 0.0
    load_combination_score: float = 0.0
    major_city_proximity: float = 0.0

    @classmethod
    def uniform(cls, value: float) -> "DimensionWeights":
        return cls(**{dim: value for dim in ALL_DIMENSIONS})


ALL_DIMENSIONS: Tuple[str, ...] = tuple(DimensionWeights.model_fields)


class SkillProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: SkillLevel
    base_weights: DimensionWeights
    random_choice_percent: float = 0
    suboptimality_percent: float = 0
    lookahead_depth: int = 0
    lookahead_breadth: int = 1
    lookahead_discount: float = 0.7


class ArchetypeProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: ArchetypeId
    name: str
    description: str
    multipliers: DimensionWeights


class BotConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill_level: SkillLevel = "medium"
    archetype: ArchetypeId = "backbone_builder"
    bot_id: str = ""
    bot_name: str = ""
