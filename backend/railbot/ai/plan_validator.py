"""
PlanValidator：执行前对完整 TurnPlan 做最终校验

按顺序模拟每个动作对资金、建造预算、载货、列车类型、新增轨道的累计影响，
收集全部违规项而不是遇到第一个就停止。
"""
from __future__ import annotations

import logging
from typing import List

from railbot.ai.reachability import ReachabilityGraph
from railbot.ai.rules import MAX_BUILD_PER_TURN, TRACK_USAGE_FEE, find_upgrade, train_capacity
from railbot.models.game import DemandCard, TrackSegment, TrainType
from railbot.models.options import (
    BuildTowardMajorCityParams,
    BuildTrackParams,
    DeliverLoadParams,
    FeasibleOption,
    PassTurnParams,
    PickupAndDeliverParams,
    TurnPlan,
    UpgradeTrainParams,
    ValidationResult,
)
from railbot.models.snapshot import WorldSnapshot

logger = logging.getLogger(__name__)


class _SimulatedState:
    """随计划推进累计变化的状态。"""

    def __init__(self, snapshot: WorldSnapshot) -> None:
        self.snapshot = snapshot
        self.money = snapshot.money
        self.carried_loads: List[str] = list(snapshot.carried_loads)
        self.train_type: TrainType = snapshot.train_type
        self.turn_build_cost = snapshot.turn_build_cost_so_far
        self.new_segments: List[TrackSegment] = []

    @property
    def remaining_budget(self) -> int:
        return MAX_BUILD_PER_TURN - self.turn_build_cost

    def movement_graph(self) -> ReachabilityGraph:
        return ReachabilityGraph.from_tracks(
            self.snapshot.all_player_tracks,
            self.snapshot.board,
            extra_segments=self.new_segments,
            extra_owner=self.snapshot.bot_player_id,
        )

    def spend(self, cost: int) -> None:
        """建轨与升级都计入本回合建造额度。"""
        self.money -= cost
        self.turn_build_cost += cost


def _find_card(snapshot: WorldSnapshot, card_id: int) -> DemandCard | None:
    return next((c for c in snapshot.demand_cards if c.id == card_id), None)


def _check_card(snapshot: WorldSnapshot, label: str, card_id: int, index: int) -> List[str]:
    card = _find_card(snapshot, card_id)
    if card is None:
        return [f"{label}: demand card {card_id} not in hand"]
    if index < 0 or index >= len(card.demands):
        return [f"{label}: invalid demand index {index}"]
    return []


def _usage_fee(graph: ReachabilityGraph, path, player_id: str) -> int:
    coords = [(p.row, p.col) for p in path]
    return len(graph.opponents_on_path(coords, player_id)) * TRACK_USAGE_FEE


def _check_reach(
    state: _SimulatedState,
    label: str,
    city: str,
    what: str = "",
) -> List[str]:
    snapshot = state.snapshot
    if snapshot.position is None:
        return [f"{label}: bot has no position on the map"]
    route = state.movement_graph().reachable_within_budget(
        snapshot.position.coord, city, snapshot.remaining_movement
    )
    if route is None:
        return [f"{label}: cannot reach {what}{city} within {snapshot.remaining_movement} movement"]
    return []


# =============================================================================
# 单动作校验
# =============================================================================


def _validate_deliver(state: _SimulatedState, params: DeliverLoadParams) -> List[str]:
    errors: List[str] = []
    if params.load_type not in state.carried_loads:
        errors.append(f"DeliverLoad: not carrying {params.load_type}")
    errors += _check_card(state.snapshot, "DeliverLoad", params.demand_card_id, params.demand_index)
    errors += _check_reach(state, "DeliverLoad", params.city)

    if len(params.move_path) > 1:
        fee = _usage_fee(state.movement_graph(), params.move_path, state.snapshot.bot_player_id)
        if fee > state.money:
            errors.append(
                f"DeliverLoad: insufficient funds for track usage fee (need {fee}M, have {state.money}M)"
            )
    return errors


def _validate_pickup_and_deliver(state: _SimulatedState, params: PickupAndDeliverParams) -> List[str]:
    snapshot = state.snapshot
    errors: List[str] = []

    capacity = train_capacity(state.train_type)
    if len(state.carried_loads) >= capacity:
        errors.append(f"PickupAndDeliver: train at capacity ({capacity} loads)")

    stocked = params.pickup_load_type in snapshot.load_availability.get(params.pickup_city, ())
    dropped = params.pickup_load_type in snapshot.dropped_loads.get(params.pickup_city, ())
    if not (stocked or dropped):
        errors.append(f"PickupAndDeliver: {params.pickup_load_type} not available at {params.pickup_city}")

    card_errors = _check_card(snapshot, "PickupAndDeliver", params.demand_card_id, params.demand_index)
    errors += card_errors
    if not card_errors:
        demand = _find_card(snapshot, params.demand_card_id).demands[params.demand_index]
        if demand.city != params.deliver_city or demand.resource != params.pickup_load_type:
            errors.append(
                f"PickupAndDeliver: demand card {params.demand_card_id} has no "
                f"{params.pickup_load_type} demand at {params.deliver_city}"
            )

    errors += _check_reach(state, "PickupAndDeliver", params.pickup_city, what="pickup city ")

    path = list(params.pickup_path) + list(params.deliver_path[1:])
    if len(path) > 1:
        fee = _usage_fee(state.movement_graph(), path, snapshot.bot_player_id)
        if fee > state.money:
            errors.append(
                f"PickupAndDeliver: insufficient funds for track usage fee (need {fee}M, have {state.money}M)"
            )
    return errors


def _validate_build(state: _SimulatedState, label: str, segments, total_cost: int) -> List[str]:
    errors: List[str] = []
    remaining = state.remaining_budget
    if total_cost > remaining:
        errors.append(f"{label}: cost {total_cost}M exceeds remaining turn budget {remaining}M")
    if total_cost > state.money:
        errors.append(f"{label}: insufficient funds (need {total_cost}M, have {state.money}M)")
    return errors


def _validate_build_track(state: _SimulatedState, params: BuildTrackParams) -> List[str]:
    if not params.segments:
        return ["BuildTrack: no segments to build"]
    return _validate_build(state, "BuildTrack", params.segments, params.total_cost)


def _validate_build_toward(state: _SimulatedState, params: BuildTowardMajorCityParams) -> List[str]:
    if not params.target_city:
        return ["BuildTowardMajorCity: missing target city"]
    if not params.segments:
        return [f"BuildTowardMajorCity: no segments to build toward {params.target_city}"]
    return _validate_build(state, "BuildTowardMajorCity", params.segments, params.total_cost)


def _validate_upgrade(state: _SimulatedState, params: UpgradeTrainParams) -> List[str]:
    if state.train_type == params.target_train_type:
        return ["UpgradeTrain: already have this train type"]
    if find_upgrade(state.train_type, params.target_train_type) is None:
        return [f"UpgradeTrain: no valid path from {state.train_type.value} to {params.target_train_type.value}"]

    errors: List[str] = []
    remaining = state.remaining_budget
    if params.cost > remaining:
        errors.append(f"UpgradeTrain: cost {params.cost}M exceeds remaining turn budget {remaining}M")
    if params.cost > state.money:
        errors.append(f"UpgradeTrain: insufficient funds (need {params.cost}M, have {state.money}M)")
    return errors


def _validate_action(state: _SimulatedState, action: FeasibleOption) -> List[str]:
    params = action.params
    if isinstance(params, DeliverLoadParams):
        return _validate_deliver(state, params)
    if isinstance(params, PickupAndDeliverParams):
        return _validate_pickup_and_deliver(state, params)
    if isinstance(params, BuildTrackParams):
        return _validate_build_track(state, params)
    if isinstance(params, BuildTowardMajorCityParams):
        return _validate_build_toward(state, params)
    if isinstance(params, UpgradeTrainParams):
        return _validate_upgrade(state, params)
    if isinstance(params, PassTurnParams):
        return []
    return [f"Unknown action type: {action.type}"]


def _apply(state: _SimulatedState, action: FeasibleOption) -> None:
    """校验后把动作效果计入模拟状态（即使有错误也计入，后续动作按预期状态校验）。"""
    params = action.params
    if isinstance(params, DeliverLoadParams):
        if params.load_type in state.carried_loads:
            state.carried_loads.remove(params.load_type)
    elif isinstance(params, PickupAndDeliverParams):
        state.carried_loads.append(params.pickup_load_type)
        if params.deliver_path:
            state.carried_loads.remove(params.pickup_load_type)
    elif isinstance(params, (BuildTrackParams, BuildTowardMajorCityParams)):
        state.spend(params.total_cost)
        state.new_segments.extend(params.segments)
    elif isinstance(params, UpgradeTrainParams):
        state.spend(params.cost)
        state.train_type = params.target_train_type


def validate_plan(plan: TurnPlan, snapshot: WorldSnapshot) -> ValidationResult:
    """
    校验完整计划

    Returns:
        ValidationResult: errors 为空即合法
    """
    if not plan.actions:
        return ValidationResult()

    state = _SimulatedState(snapshot)
    errors: List[str] = []
    for action in plan.actions:
        errors.extend(_validate_action(state, action))
        _apply(state, action)

    if state.money < 0:
        errors.append(f"Plan leaves bot with negative funds: {state.money}M")

    if errors:
        logger.debug("[PlanValidator] game=%s bot=%s errors=%s", snapshot.game_id, snapshot.bot_player_id, errors)
    return ValidationResult(errors=tuple(errors))
