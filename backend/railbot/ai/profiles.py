"""
静态配置：技能档位 & 性格原型

进程启动时构造一次，之后只读。
"""
from __future__ import annotations

from typing import Dict

from railbot.models.profiles import ArchetypeProfile, DimensionWeights, SkillProfile

# 中档基准权重
_BALANCED_WEIGHTS = DimensionWeights(
    immediate_income=0.8,
    income_per_milepost=0.7,
    multi_delivery_potential=0.6,
    network_expansion_value=0.7,
    victory_progress=0.5,
    competitor_blocking=0.3,
    risk_exposure=0.4,
    load_scarcity=0.5,
    upgrade_roi=0.6,
    backbone_alignment=0.5,
    load_combination_score=0.6,
    major_city_proximity=0.5,
)

SKILL_PROFILES: Dict[str, SkillProfile] = {
    # 简单：只盯眼前收入，经常乱选
    "easy": SkillProfile(
        level="easy",
        base_weights=DimensionWeights(
            immediate_income=1.0,
            income_per_milepost=0.3,
            multi_delivery_potential=0.2,
            network_expansion_value=0.3,
            victory_progress=0.1,
            competitor_blocking=0.0,
            risk_exposure=0.1,
            load_scarcity=0.2,
            upgrade_roi=0.3,
            backbone_alignment=0.1,
            load_combination_score=0.2,
            major_city_proximity=0.3,
        ),
        random_choice_percent=20,
        suboptimality_percent=30,
        lookahead_depth=0,
        lookahead_breadth=1,
        lookahead_discount=0.7,
    ),
    "medium": SkillProfile(
        level="medium",
        base_weights=_BALANCED_WEIGHTS,
        random_choice_percent=5,
        suboptimality_percent=10,
        lookahead_depth=2,
        lookahead_breadth=3,
        lookahead_discount=0.7,
    ),
    # 困难：全维度高权重，不引入随机
    "hard": SkillProfile(
        level="hard",
        base_weights=DimensionWeights(
            immediate_income=0.9,
            income_per_milepost=0.9,
            multi_delivery_potential=0.8,
            network_expansion_value=0.9,
            victory_progress=0.8,
            competitor_blocking=0.6,
            risk_exposure=0.7,
            load_scarcity=0.7,
            upgrade_roi=0.8,
            backbone_alignment=0.7,
            load_combination_score=0.8,
            major_city_proximity=0.7,
        ),
        random_choice_percent=0,
        suboptimality_percent=0,
        lookahead_depth=4,
        lookahead_breadth=3,
        lookahead_discount=0.7,
    ),
}


def _multipliers(**overrides: float) -> DimensionWeights:
    return DimensionWeights.uniform(1.0).model_copy(update=overrides)


ARCHETYPE_PROFILES: Dict[str, ArchetypeProfile] = {
    "backbone_builder": ArchetypeProfile(
        id="backbone_builder",
        name="Backbone Builder",
        description="Builds a strong trunk network connecting major cities before focusing on deliveries.",
        multipliers=_multipliers(
            network_expansion_value=1.5,
            backbone_alignment=2.0,
            major_city_proximity=1.5,
            victory_progress=1.3,
            immediate_income=0.7,
            load_scarcity=0.8,
        ),
    ),
    "freight_optimizer": ArchetypeProfile(
        id="freight_optimizer",
        name="Freight Optimizer",
        description="Maximizes income per milepost by optimizing load combinations and delivery routes.",
        multipliers=_multipliers(
            immediate_income=1.5,
            income_per_milepost=2.0,
            multi_delivery_potential=1.5,
            load_combination_score=1.5,
            network_expansion_value=0.7,
            victory_progress=0.8,
        ),
    ),
    "trunk_sprinter": ArchetypeProfile(
        id="trunk_sprinter",
        name="Trunk Sprinter",
        description="Builds direct routes and upgrades trains early for fast, high-value deliveries.",
        multipliers=_multipliers(
            upgrade_roi=2.0,
            immediate_income=1.3,
            income_per_milepost=1.5,
            network_expansion_value=0.8,
            backbone_alignment=0.6,
            competitor_blocking=0.5,
        ),
    ),
    "continental_connector": ArchetypeProfile(
        id="continental_connector",
        name="Continental Connector",
        description="Races to connect 7 major cities for victory, prioritizing network reach over income.",
        multipliers=_multipliers(
            victory_progress=2.0,
            network_expansion_value=1.5,
            major_city_proximity=2.0,
            backbone_alignment=1.3,
            immediate_income=0.6,
            load_combination_score=0.7,
            upgrade_roi=0.8,
        ),
    ),
    "opportunist": ArchetypeProfile(
        id="opportunist",
        name="Opportunist",
        description="Adapts strategy dynamically, exploiting scarce loads and competitor weaknesses.",
        multipliers=_multipliers(
            competitor_blocking=1.5,
            load_scarcity=1.5,
            risk_exposure=1.3,
            multi_delivery_potential=1.3,
            backbone_alignment=0.7,
            major_city_proximity=0.8,
        ),
    ),
}


def get_skill_profile(level: str) -> SkillProfile:
    try:
        return SKILL_PROFILES[level]
    except KeyError:
        raise ValueError(f"unknown skill level: {level}") from None


def get_archetype_profile(archetype_id: str) -> ArchetypeProfile:
    try:
        return ARCHETYPE_PROFILES[archetype_id]
    except KeyError:
        raise ValueError(f"unknown archetype: {archetype_id}") from None
