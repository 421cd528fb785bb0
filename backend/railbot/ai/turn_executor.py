"""
TurnExecutor：把已校验的 TurnPlan 逐个动作写入游戏状态

- 严格按顺序执行，遇到第一个失败即停止
- 建轨在单个事务内完成（读取合并轨道记录 + 扣款），要么全部生效要么全部回滚
- 已完成的动作不回滚
"""
from __future__ import annotations

import logging
import time
from typing import Sequence

from railbot.models.board import Point
from railbot.models.game import PlayerTrackState, TrackSegment
from railbot.models.options import (
    BuildTowardMajorCityParams,
    BuildTrackParams,
    DeliverLoadParams,
    ExecutionResult,
    FeasibleOption,
    PassTurnParams,
    PickupAndDeliverParams,
    TurnPlan,
    UpgradeTrainParams,
)
from railbot.models.snapshot import WorldSnapshot
from railbot.services.gateway import GameGateway

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


async def _move_along(gateway: GameGateway, snapshot: WorldSnapshot, path: Sequence[Point]) -> None:
    """第一个点是当前位置，之后每一跳持久化一次，消耗 1 点移动力。"""
    for point in path[1:]:
        await gateway.move_train_for_user(snapshot.game_id, snapshot.bot_user_id, point, 1)


async def _deliver(
    gateway: GameGateway,
    snapshot: WorldSnapshot,
    city: str,
    load_type: str,
    demand_card_id: int,
) -> None:
    payment = await gateway.deliver_load_for_user(
        snapshot.game_id, snapshot.bot_user_id, city, load_type, demand_card_id
    )
    logger.info("[TurnExecutor] 送达 %s -> %s (+%sM)", load_type, city, payment)

    # 货物回到供应池；失败不影响本次送货
    try:
        await gateway.return_load(city, load_type, snapshot.game_id)
    except Exception as exc:
        logger.warning("[TurnExecutor] 货物归还失败: %s @ %s: %s", load_type, city, exc)


async def _execute_deliver(gateway: GameGateway, snapshot: WorldSnapshot, params: DeliverLoadParams) -> None:
    await _move_along(gateway, snapshot, params.move_path)
    await _deliver(gateway, snapshot, params.city, params.load_type, params.demand_card_id)


async def _execute_pickup_and_deliver(
    gateway: GameGateway,
    snapshot: WorldSnapshot,
    params: PickupAndDeliverParams,
) -> None:
    await _move_along(gateway, snapshot, params.pickup_path)

    async with gateway.transaction() as tx:
        loads = await tx.get_player_loads(snapshot.game_id, snapshot.bot_user_id)
        loads.append(params.pickup_load_type)
        await tx.set_player_loads(snapshot.game_id, snapshot.bot_user_id, loads)

    if params.pickup_load_type in snapshot.dropped_loads.get(params.pickup_city, ()):
        await gateway.pickup_dropped_load(params.pickup_city, params.pickup_load_type, snapshot.game_id)

    if params.deliver_path:
        await _move_along(gateway, snapshot, params.deliver_path)
        await _deliver(gateway, snapshot, params.deliver_city, params.pickup_load_type, params.demand_card_id)


async def _execute_build(
    gateway: GameGateway,
    snapshot: WorldSnapshot,
    segments: Sequence[TrackSegment],
    cost: int,
) -> None:
    async with gateway.transaction() as tx:
        existing = await tx.get_track_state(snapshot.game_id, snapshot.bot_player_id)
        if existing is None:
            existing = PlayerTrackState(player_id=snapshot.bot_player_id, game_id=snapshot.game_id)
        merged = existing.model_copy(
            update={
                "segments": tuple(existing.segments) + tuple(segments),
                "total_cost": existing.total_cost + cost,
                "turn_build_cost": existing.turn_build_cost + cost,
            }
        )
        await tx.upsert_track_state(merged)
        await tx.adjust_money(snapshot.game_id, snapshot.bot_user_id, -cost)
    logger.info("[TurnExecutor] 建轨 %d 段 (%sM)", len(segments), cost)


async def _execute_upgrade(gateway: GameGateway, snapshot: WorldSnapshot, params: UpgradeTrainParams) -> None:
    await gateway.purchase_train_type(
        snapshot.game_id, snapshot.bot_user_id, params.kind, params.target_train_type
    )
    logger.info("[TurnExecutor] 列车变更为 %s (%sM)", params.target_train_type.value, params.cost)


async def _execute_action(gateway: GameGateway, snapshot: WorldSnapshot, action: FeasibleOption) -> None:
    params = action.params
    if isinstance(params, DeliverLoadParams):
        await _execute_deliver(gateway, snapshot, params)
    elif isinstance(params, PickupAndDeliverParams):
        await _execute_pickup_and_deliver(gateway, snapshot, params)
    elif isinstance(params, (BuildTrackParams, BuildTowardMajorCityParams)):
        await _execute_build(gateway, snapshot, params.segments, params.total_cost)
    elif isinstance(params, UpgradeTrainParams):
        await _execute_upgrade(gateway, snapshot, params)
    elif isinstance(params, PassTurnParams):
        return
    else:
        raise ValueError(f"Unknown action type: {action.type}")


async def execute_plan(gateway: GameGateway, plan: TurnPlan, snapshot: WorldSnapshot) -> ExecutionResult:
    """
    执行计划

    Returns:
        ExecutionResult: 失败时 actions_executed 为失败前已完成的动作数
    """
    started = time.monotonic()
    executed = 0

    for action in plan.actions:
        try:
            await _execute_action(gateway, snapshot, action)
        except Exception as exc:
            logger.warning(
                "[TurnExecutor] game=%s bot=%s 动作失败 %s: %s",
                snapshot.game_id,
                snapshot.bot_player_id,
                action.description,
                exc,
            )
            return ExecutionResult(
                success=False,
                actions_executed=executed,
                error=str(exc) or type(exc).__name__,
                duration_ms=_elapsed_ms(started),
            )
        executed += 1

    return ExecutionResult(success=True, actions_executed=executed, duration_ms=_elapsed_ms(started))
