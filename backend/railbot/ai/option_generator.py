"""
OptionGenerator：枚举 bot 本回合所有候选行动

每个候选要么可行（附执行参数），要么不可行（附非空原因，仅供审计）。
结果中始终恰好包含一个可行的 PassTurn。
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from railbot.ai.build_planner import BuildPlanner, segments_cost
from railbot.ai.reachability import ReachabilityGraph
from railbot.ai.rules import MAX_BUILD_PER_TURN, VALID_UPGRADES, train_capacity
from railbot.models.board import Coord
from railbot.models.options import (
    ActionType,
    BuildTowardMajorCityParams,
    BuildTrackParams,
    DeliverLoadParams,
    FeasibleOption,
    GenerationResult,
    InfeasibleOption,
    PickupAndDeliverParams,
    UpgradeTrainParams,
    pass_turn_option,
)
from railbot.models.snapshot import WorldSnapshot

logger = logging.getLogger(__name__)

NO_POSITION_REASON = "Bot has no position on the map"


class _Collector:
    """收集可行 / 不可行候选。"""

    def __init__(self) -> None:
        self.feasible: List[FeasibleOption] = []
        self.infeasible: List[InfeasibleOption] = []

    def accept(self, action: ActionType, description: str, params) -> None:
        self.feasible.append(FeasibleOption(type=action, description=description, params=params))

    def reject(self, action: ActionType, description: str, reason: str) -> None:
        self.infeasible.append(InfeasibleOption(type=action, description=description, reason=reason))


def _spend_rejection(cost: int, snapshot: WorldSnapshot, label: str) -> Optional[str]:
    remaining = MAX_BUILD_PER_TURN - snapshot.turn_build_cost_so_far
    if cost > remaining:
        return f"{label} cost {cost}M exceeds remaining turn budget {remaining}M"
    if cost > snapshot.money:
        return f"Insufficient funds: need {cost}M, have {snapshot.money}M"
    return None


def _build_budget(snapshot: WorldSnapshot) -> int:
    """本回合还能用于建造的金额；预算或资金耗尽时为 0。"""
    remaining = MAX_BUILD_PER_TURN - snapshot.turn_build_cost_so_far
    if remaining <= 0 or snapshot.money <= 0:
        return 0
    return min(remaining, snapshot.money)


def _network_cities(snapshot: WorldSnapshot) -> set:
    """bot 轨道任一节点触及的城市名。"""
    board = snapshot.board
    cities = set()
    for seg in snapshot.track_segments:
        for end in (seg.from_, seg.to):
            name = board.city_at(end.row, end.col)
            if name:
                cities.add(name)
    return cities


def _make_planner(snapshot: WorldSnapshot) -> BuildPlanner:
    occupied = [
        seg
        for track in snapshot.all_player_tracks
        if track.player_id != snapshot.bot_player_id
        for seg in track.segments
    ]
    return BuildPlanner(
        snapshot.board,
        snapshot.track_segments,
        occupied_segments=occupied,
        start_position=snapshot.position.coord if snapshot.position else None,
    )


# =============================================================================
# 送货 / 取货
# =============================================================================


def _generate_delivery_options(snapshot: WorldSnapshot, graph: ReachabilityGraph, out: _Collector) -> None:
    if not snapshot.carried_loads or not snapshot.demand_cards:
        return

    for card in snapshot.demand_cards:
        for index, demand in enumerate(card.demands):
            if demand.resource not in snapshot.carried_loads:
                continue
            description = f"Deliver {demand.resource} to {demand.city} for {demand.payment}M"
            if snapshot.position is None:
                out.reject(ActionType.DELIVER_LOAD, description, NO_POSITION_REASON)
                continue

            route = graph.reachable_within_budget(
                snapshot.position.coord, demand.city, snapshot.remaining_movement
            )
            if route is None:
                out.reject(
                    ActionType.DELIVER_LOAD,
                    description,
                    f"Cannot reach {demand.city} within {snapshot.remaining_movement} movement",
                )
                continue

            out.accept(
                ActionType.DELIVER_LOAD,
                description,
                DeliverLoadParams(
                    move_path=graph.to_points(route.path),
                    demand_card_id=card.id,
                    demand_index=index,
                    load_type=demand.resource,
                    city=demand.city,
                ),
            )


def _pickup_cities(snapshot: WorldSnapshot, load_type: str) -> List[str]:
    cities = [city for city, loads in snapshot.load_availability.items() if load_type in loads]
    for city, loads in snapshot.dropped_loads.items():
        if load_type in loads and city not in cities:
            cities.append(city)
    return cities


def _generate_pickup_options(snapshot: WorldSnapshot, graph: ReachabilityGraph, out: _Collector) -> None:
    if snapshot.position is None:
        return
    if len(snapshot.carried_loads) >= train_capacity(snapshot.train_type):
        return

    movement = snapshot.remaining_movement
    reachable = {route.city: route for route in graph.reachable_cities(snapshot.position.coord, movement)}
    for card in snapshot.demand_cards:
        for index, demand in enumerate(card.demands):
            if demand.resource in snapshot.carried_loads:
                continue

            for pickup_city in _pickup_cities(snapshot, demand.resource):
                description = (
                    f"Pick up {demand.resource} at {pickup_city}, "
                    f"deliver to {demand.city} for {demand.payment}M"
                )
                pickup = reachable.get(pickup_city)
                if pickup is None:
                    out.reject(
                        ActionType.PICKUP_AND_DELIVER,
                        description,
                        f"Cannot reach {pickup_city} within {movement} movement",
                    )
                    continue

                # 剩余移动力够的话同回合继续送货
                delivery = graph.reachable_within_budget(pickup.coord, demand.city, movement - pickup.cost)
                out.accept(
                    ActionType.PICKUP_AND_DELIVER,
                    description,
                    PickupAndDeliverParams(
                        pickup_path=graph.to_points(pickup.path),
                        pickup_city=pickup_city,
                        pickup_load_type=demand.resource,
                        deliver_path=graph.to_points(delivery.path) if delivery else (),
                        deliver_city=demand.city,
                        demand_card_id=card.id,
                        demand_index=index,
                    ),
                )


# =============================================================================
# 建轨
# =============================================================================


def _city_targets(snapshot: WorldSnapshot, city: str) -> List[Coord]:
    group = snapshot.board.major_city(city)
    if group is not None:
        return list(group.coords)
    return [p.coord for p in snapshot.board.city_mileposts(city)]


def _generate_build_track_options(snapshot: WorldSnapshot, planner: BuildPlanner, out: _Collector) -> None:
    budget = _build_budget(snapshot)
    if budget <= 0:
        return

    connected = _network_cities(snapshot)
    seen = set()
    for card in snapshot.demand_cards:
        for demand in card.demands:
            city = demand.city
            if city in seen or city in connected:
                continue
            seen.add(city)

            segments = planner.plan(_city_targets(snapshot, city), budget)
            if not segments:
                continue
            total = segments_cost(segments)
            description = f"Build track toward {city} ({total}M, {len(segments)} segments)"
            reason = _spend_rejection(total, snapshot, "Build")
            if reason:
                out.reject(ActionType.BUILD_TRACK, description, reason)
                continue
            out.accept(
                ActionType.BUILD_TRACK,
                description,
                BuildTrackParams(segments=segments, total_cost=total),
            )


def _generate_build_toward_major_city_options(
    snapshot: WorldSnapshot, planner: BuildPlanner, out: _Collector
) -> None:
    budget = _build_budget(snapshot)
    if budget <= 0:
        return

    connected = _network_cities(snapshot)
    for group in snapshot.board.major_cities:
        if group.city_name in connected:
            continue
        segments = planner.plan(group.coords, budget)
        if not segments:
            continue
        total = segments_cost(segments)
        description = f"Build toward {group.city_name} ({total}M, {len(segments)} segments)"
        reason = _spend_rejection(total, snapshot, "Build")
        if reason:
            out.reject(ActionType.BUILD_TOWARD_MAJOR_CITY, description, reason)
            continue
        out.accept(
            ActionType.BUILD_TOWARD_MAJOR_CITY,
            description,
            BuildTowardMajorCityParams(target_city=group.city_name, segments=segments, total_cost=total),
        )


# =============================================================================
# 升级
# =============================================================================


def _generate_upgrade_options(snapshot: WorldSnapshot, out: _Collector) -> None:
    for path in VALID_UPGRADES[snapshot.train_type]:
        verb = "Upgrade" if path.kind == "upgrade" else "Crossgrade"
        description = f"{verb} to {path.target_train_type.value} ({path.cost}M)"
        reason = _spend_rejection(path.cost, snapshot, "Upgrade")
        if reason:
            out.reject(ActionType.UPGRADE_TRAIN, description, reason)
            continue
        out.accept(
            ActionType.UPGRADE_TRAIN,
            description,
            UpgradeTrainParams(target_train_type=path.target_train_type, kind=path.kind, cost=path.cost),
        )


# =============================================================================
# 入口
# =============================================================================


def generate(snapshot: WorldSnapshot) -> GenerationResult:
    """生成本回合全部候选。initialBuild 阶段只生成建轨与 PassTurn。"""
    out = _Collector()

    if snapshot.game_phase == "active":
        graph = ReachabilityGraph.from_tracks(snapshot.all_player_tracks, snapshot.board)
        _generate_delivery_options(snapshot, graph, out)
        _generate_pickup_options(snapshot, graph, out)

    if _build_budget(snapshot) > 0:
        planner = _make_planner(snapshot)
        _generate_build_track_options(snapshot, planner, out)
        _generate_build_toward_major_city_options(snapshot, planner, out)

    if snapshot.game_phase == "active":
        _generate_upgrade_options(snapshot, out)

    out.feasible.append(pass_turn_option())

    counts: Dict[str, int] = {}
    for option in out.feasible:
        counts[option.type.value] = counts.get(option.type.value, 0) + 1
    logger.debug(
        "[OptionGenerator] game=%s bot=%s feasible=%s infeasible=%d",
        snapshot.game_id,
        snapshot.bot_player_id,
        counts,
        len(out.infeasible),
    )
    return GenerationResult(feasible=out.feasible, infeasible=out.infeasible)
