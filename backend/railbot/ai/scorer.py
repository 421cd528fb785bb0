"""
Scorer：按技能档位 × 性格原型为可行候选打分并排序

score = Σ base_weight[d] × archetype_multiplier[d] × value[d]
其中 value[d] 夹在 [0, 1]，只计算该行动类型涉及的维度。
打分完全确定，不含随机成分。
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from railbot.ai.profiles import get_archetype_profile, get_skill_profile
from railbot.ai.rules import (
    DEFAULT_VICTORY_CASH,
    TRAIN_PROPERTIES,
    VICTORY_MAJOR_CITIES,
    train_capacity,
)
from railbot.models.options import (
    BuildTowardMajorCityParams,
    BuildTrackParams,
    DeliverLoadParams,
    FeasibleOption,
    PickupAndDeliverParams,
    ScoredOption,
    UpgradeTrainParams,
)
from railbot.models.profiles import ALL_DIMENSIONS, BotConfig
from railbot.models.snapshot import WorldSnapshot

logger = logging.getLogger(__name__)

Values = Dict[str, float]


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def final_weights(config: BotConfig) -> Dict[str, float]:
    skill = get_skill_profile(config.skill_level)
    archetype = get_archetype_profile(config.archetype)
    return {
        dim: getattr(skill.base_weights, dim) * getattr(archetype.multipliers, dim)
        for dim in ALL_DIMENSIONS
    }


def _count_load_availability(snapshot: WorldSnapshot, load_type: str) -> int:
    return sum(loads.count(load_type) for loads in snapshot.load_availability.values())


def _demand_payment(snapshot: WorldSnapshot, card_id: int, index: int) -> int:
    for card in snapshot.demand_cards:
        if card.id == card_id and 0 <= index < len(card.demands):
            return card.demands[index].payment
    return 0


def _is_major_city(snapshot: WorldSnapshot, city: str) -> bool:
    return snapshot.board.major_city(city) is not None


# =============================================================================
# 各行动类型的维度取值
# =============================================================================


def _eval_deliver(params: DeliverLoadParams, snapshot: WorldSnapshot) -> Values:
    payment = _demand_payment(snapshot, params.demand_card_id, params.demand_index)
    path_len = max(len(params.move_path) - 1, 1)
    others = [load for load in snapshot.carried_loads if load != params.load_type]
    values = {
        "immediate_income": payment / 25,
        "income_per_milepost": payment / (path_len * 5),
        "multi_delivery_potential": len(others) / 2,
        "risk_exposure": 0.8 - (len(snapshot.carried_loads) - 1) * 0.2,
        "victory_progress": (snapshot.money + payment) / DEFAULT_VICTORY_CASH,
        "load_scarcity": 1.0 - _count_load_availability(snapshot, params.load_type) / 5,
    }
    if _is_major_city(snapshot, params.city):
        values["major_city_proximity"] = 0.5
    return values


def _eval_pickup_and_deliver(params: PickupAndDeliverParams, snapshot: WorldSnapshot) -> Values:
    payment = _demand_payment(snapshot, params.demand_card_id, params.demand_index)
    pickup_len = max(len(params.pickup_path) - 1, 1)
    slots_after = train_capacity(snapshot.train_type) - len(snapshot.carried_loads) - 1
    matching = sum(
        1
        for card in snapshot.demand_cards
        for demand in card.demands
        if demand.resource == params.pickup_load_type
    )
    return {
        "immediate_income": payment / 25 * 0.6,
        # 送货距离未知，按 5 估算
        "income_per_milepost": payment / ((pickup_len + 5) * 3),
        "multi_delivery_potential": slots_after / 2,
        "load_combination_score": matching / 3,
        "load_scarcity": 1.0 - _count_load_availability(snapshot, params.pickup_load_type) / 5,
        "risk_exposure": 0.5 - len(snapshot.carried_loads) * 0.15,
    }


def _eval_build_track(params: BuildTrackParams, snapshot: WorldSnapshot) -> Values:
    count = len(params.segments)
    avg_cost = params.total_cost / count if count else 0
    return {
        "network_expansion_value": count / 8,
        "backbone_alignment": 1.0 - avg_cost / 5,
        "risk_exposure": (snapshot.money - params.total_cost) / 50,
        "victory_progress": snapshot.connected_major_cities / VICTORY_MAJOR_CITIES * 0.3,
    }


def _opponents_missing_city(snapshot: WorldSnapshot, city: str) -> float:
    """目标城市尚未被对手轨道触及的对手比例。"""
    if not snapshot.opponents:
        return 0.0
    group = snapshot.board.major_city(city)
    coords = set(group.coords) if group else set()
    reached = 0
    for track in snapshot.all_player_tracks:
        if track.player_id == snapshot.bot_player_id:
            continue
        if any((s.from_.row, s.from_.col) in coords or (s.to.row, s.to.col) in coords for s in track.segments):
            reached += 1
    return (len(snapshot.opponents) - reached) / len(snapshot.opponents)


def _eval_build_toward_major_city(params: BuildTowardMajorCityParams, snapshot: WorldSnapshot) -> Values:
    count = len(params.segments)
    return {
        "network_expansion_value": count / 8 + 0.2,
        "major_city_proximity": 0.8,
        "victory_progress": (snapshot.connected_major_cities + 1) / VICTORY_MAJOR_CITIES,
        "backbone_alignment": 0.7 + count / 20,
        "risk_exposure": (snapshot.money - params.total_cost) / 50,
        "competitor_blocking": _opponents_missing_city(snapshot, params.target_city),
    }


def _eval_upgrade(params: UpgradeTrainParams, snapshot: WorldSnapshot) -> Values:
    target = TRAIN_PROPERTIES[params.target_train_type]
    current = TRAIN_PROPERTIES[snapshot.train_type]
    speed_gain = target.speed - current.speed
    capacity_gain = target.capacity - current.capacity
    return {
        "upgrade_roi": (speed_gain / 3 + capacity_gain) / (params.cost / 10),
        "multi_delivery_potential": 0.8 if capacity_gain > 0 else 0.2,
        "income_per_milepost": 0.6 if speed_gain > 0 else 0.1,
        "risk_exposure": (snapshot.money - params.cost) / 50,
    }


def evaluate_dimensions(option: FeasibleOption, snapshot: WorldSnapshot) -> Values:
    """单个候选在 12 个维度上的取值（未涉及的维度为 0）。"""
    params = option.params
    if isinstance(params, DeliverLoadParams):
        raw = _eval_deliver(params, snapshot)
    elif isinstance(params, PickupAndDeliverParams):
        raw = _eval_pickup_and_deliver(params, snapshot)
    elif isinstance(params, BuildTowardMajorCityParams):
        raw = _eval_build_toward_major_city(params, snapshot)
    elif isinstance(params, BuildTrackParams):
        raw = _eval_build_track(params, snapshot)
    elif isinstance(params, UpgradeTrainParams):
        raw = _eval_upgrade(params, snapshot)
    else:
        # PassTurn：不花钱，仅有微弱的风险收益
        raw = {"risk_exposure": 0.1}

    values = {dim: 0.0 for dim in ALL_DIMENSIONS}
    for dim, value in raw.items():
        values[dim] = clamp(value)
    return values


def score(
    options: Iterable[FeasibleOption],
    snapshot: WorldSnapshot,
    config: BotConfig,
) -> List[ScoredOption]:
    """打分并按分数降序排列（同分保持输入顺序）。"""
    weights = final_weights(config)
    scored: List[ScoredOption] = []

    for option in options:
        values = evaluate_dimensions(option, snapshot)
        total = 0.0
        contributions = []
        for dim in ALL_DIMENSIONS:
            contribution = weights[dim] * values[dim]
            total += contribution
            if contribution > 0.01:
                contributions.append((dim, contribution))

        top = sorted(contributions, key=lambda item: item[1], reverse=True)[:3]
        rationale = (
            ", ".join(f"{dim}:{value:.2f}" for dim, value in top)
            if top
            else "minimal scoring signal"
        )
        scored.append(
            ScoredOption(
                type=option.type,
                description=option.description,
                params=option.params,
                score=total,
                rationale=rationale,
            )
        )

    scored.sort(key=lambda o: o.score, reverse=True)
    if scored:
        logger.debug(
            "[Scorer] %s/%s top=%s",
            config.skill_level,
            config.archetype,
            [f"{o.type.value}({o.score:.2f})" for o in scored[:3]],
        )
    return scored
