"""
AIStrategyEngine：单个 bot 回合的总编排

流程: 捕获快照 → 生成候选 → 打分 → 按技能档位扰动候选顺序 →
      逐个校验 / 执行（最多 MAX_RETRIES 次）→ 全部失败则 PassTurn 兜底 →
      构建并保存审计 → 广播回合完成事件
"""
from __future__ import annotations

import hashlib
import json
import logging
import random
import time
from typing import List, Optional, Sequence, Tuple

from railbot.ai import option_generator, scorer
from railbot.ai.plan_validator import validate_plan
from railbot.ai.profiles import get_archetype_profile, get_skill_profile
from railbot.ai.turn_executor import execute_plan
from railbot.ai.world_snapshot import capture
from railbot.config import settings
from railbot.errors import NotFoundError
from railbot.models.audit import BotStatus, StrategyAudit, TurnResult
from railbot.models.board import BoardCatalog
from railbot.models.options import (
    ExecutionResult,
    FeasibleOption,
    InfeasibleOption,
    ScoredOption,
    TurnPlan,
    pass_turn_option,
)
from railbot.models.profiles import BotConfig
from railbot.models.snapshot import WorldSnapshot
from railbot.services.gateway import GameGateway

logger = logging.getLogger(__name__)

MAX_RETRIES = 3

TURN_START_EVENT = "bot:turn-start"
TURN_COMPLETE_EVENT = "bot:turn-complete"

FALLBACK_DESCRIPTION = "PassTurn (fallback - all retries exhausted)"


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def compute_snapshot_hash(snapshot: WorldSnapshot) -> str:
    """快照关键字段的短摘要（8 位十六进制），用于审计对比。"""
    position = snapshot.position
    digest_source = {
        "g": snapshot.game_id,
        "b": snapshot.bot_player_id,
        "m": snapshot.money,
        "p": {"row": position.row, "col": position.col} if position else None,
        "l": list(snapshot.carried_loads),
        "t": len(snapshot.track_segments),
    }
    raw = json.dumps(digest_source, sort_keys=True)
    return hashlib.md5(raw.encode("utf-8")).hexdigest()[:8]


def select_candidate_order(
    scored: Sequence[ScoredOption],
    random_choice_percent: float,
    suboptimality_percent: float,
    rng: random.Random,
) -> List[ScoredOption]:
    """
    按技能档位决定本回合的候选顺序（整回合只抽一次随机数）

    - roll < random_choice_percent: 随机挑一个放到最前
    - roll < random_choice_percent + suboptimality_percent: 第二名放到最前
    - 否则保持排名顺序
    """
    ordered = list(scored)
    if len(ordered) <= 1:
        return ordered

    roll = rng.random() * 100
    if roll < random_choice_percent:
        index = rng.randrange(len(ordered))
        ordered.insert(0, ordered.pop(index))
    elif roll < random_choice_percent + suboptimality_percent:
        ordered[0], ordered[1] = ordered[1], ordered[0]
    return ordered


def _bot_status(snapshot: Optional[WorldSnapshot]) -> BotStatus:
    if snapshot is None:
        return BotStatus()
    return BotStatus(
        cash=snapshot.money,
        train_type=snapshot.train_type,
        loads=snapshot.carried_loads,
        major_cities_connected=snapshot.connected_major_cities,
    )


def build_audit(
    config: BotConfig,
    turn_number: int,
    snapshot: Optional[WorldSnapshot],
    scored: Sequence[ScoredOption],
    rejected: Sequence[InfeasibleOption],
    selected_plan: Sequence[FeasibleOption],
    execution: ExecutionResult,
    duration_ms: int,
) -> StrategyAudit:
    """组装审计记录。snapshot 为 None 表示快照捕获失败（降级审计）。"""
    archetype = get_archetype_profile(config.archetype)
    current_plan = (
        "; ".join(action.description for action in selected_plan)
        if selected_plan
        else "PassTurn (no actions)"
    )
    return StrategyAudit(
        turn_number=turn_number,
        archetype_id=archetype.id,
        archetype_name=archetype.name,
        skill_level=config.skill_level,
        snapshot_hash=compute_snapshot_hash(snapshot) if snapshot else "",
        current_plan=current_plan,
        archetype_rationale=f"{archetype.name}: {archetype.description}",
        feasible_options=tuple(scored),
        rejected_options=tuple(rejected),
        selected_plan=tuple(selected_plan),
        execution_result=execution,
        bot_status=_bot_status(snapshot),
        duration_ms=duration_ms,
    )


async def _save_audit_safe(gateway: GameGateway, game_id: str, bot_player_id: str, audit: StrategyAudit) -> None:
    """审计落库失败只记录日志，不影响回合结果。"""
    if not settings.audit_persistence_enabled:
        return
    try:
        await gateway.save_turn_audit(game_id, bot_player_id, audit)
    except Exception as exc:
        logger.error("[AIStrategyEngine] game=%s bot=%s 审计保存失败: %s", game_id, bot_player_id, exc)


async def _finish_turn(
    gateway: GameGateway,
    game_id: str,
    bot_player_id: str,
    audit: StrategyAudit,
) -> None:
    await _save_audit_safe(gateway, game_id, bot_player_id, audit)
    await gateway.emit_to_game(
        game_id,
        TURN_COMPLETE_EVENT,
        {"botPlayerId": bot_player_id, "audit": audit.model_dump(mode="json")},
    )


async def _attempt_candidates(
    gateway: GameGateway,
    snapshot: WorldSnapshot,
    candidates: Sequence[ScoredOption],
) -> Tuple[Optional[TurnPlan], Optional[ExecutionResult], int]:
    """依次尝试候选，返回 (成功的计划, 执行结果, 重试次数)；全部失败时计划为 None。"""
    retries = 0
    attempts = min(MAX_RETRIES, len(candidates))
    for candidate in candidates[:attempts]:
        plan = TurnPlan(actions=(candidate,))

        validation = validate_plan(plan, snapshot)
        if not validation.valid:
            retries += 1
            logger.info(
                "[AIStrategyEngine] game=%s bot=%s 候选未通过校验 (%s): %s",
                snapshot.game_id,
                snapshot.bot_player_id,
                candidate.description,
                "; ".join(validation.errors),
            )
            continue

        result = await execute_plan(gateway, plan, snapshot)
        if result.success:
            return plan, result, retries

        retries += 1
        logger.info(
            "[AIStrategyEngine] game=%s bot=%s 候选执行失败 (%s): %s",
            snapshot.game_id,
            snapshot.bot_player_id,
            candidate.description,
            result.error,
        )
    return None, None, retries


async def take_turn(
    gateway: GameGateway,
    board: BoardCatalog,
    game_id: str,
    bot_player_id: str,
    bot_user_id: str,
    config: BotConfig,
    turn_number: int,
    rng: Optional[random.Random] = None,
) -> TurnResult:
    """
    执行一个完整的 bot 回合

    Args:
        rng: 随机源（测试时传入固定种子以获得确定性）

    Returns:
        TurnResult: 回合结果与审计记录
    """
    started = time.monotonic()
    rng = rng or random.Random()
    skill = get_skill_profile(config.skill_level)

    await gateway.emit_to_game(
        game_id, TURN_START_EVENT, {"botPlayerId": bot_player_id, "turnNumber": turn_number}
    )

    try:
        snapshot = await capture(gateway, board, game_id, bot_player_id, bot_user_id)
    except Exception as exc:
        logger.error("[AIStrategyEngine] game=%s bot=%s 快照捕获失败: %s", game_id, bot_player_id, exc)
        execution = ExecutionResult(success=False, error=str(exc) or type(exc).__name__)
        audit = build_audit(config, turn_number, None, (), (), (), execution, _elapsed_ms(started))
        await _finish_turn(gateway, game_id, bot_player_id, audit)
        return TurnResult(success=False, audit=audit, retries_used=0, fell_back_to_pass=True)

    generation = option_generator.generate(snapshot)
    scored = scorer.score(generation.feasible, snapshot, config)
    candidates = select_candidate_order(
        scored, skill.random_choice_percent, skill.suboptimality_percent, rng
    )

    plan, execution, retries = await _attempt_candidates(gateway, snapshot, candidates)
    fell_back = plan is None
    if plan is None:
        plan = TurnPlan(actions=(pass_turn_option(FALLBACK_DESCRIPTION),))
        execution = await execute_plan(gateway, plan, snapshot)
        logger.warning(
            "[AIStrategyEngine] game=%s bot=%s 所有候选均失败 (retries=%d)，改为 PassTurn",
            game_id,
            bot_player_id,
            retries,
        )

    audit = build_audit(
        config,
        turn_number,
        snapshot,
        scored,
        generation.infeasible,
        plan.actions,
        execution,
        _elapsed_ms(started),
    )
    await _finish_turn(gateway, game_id, bot_player_id, audit)

    logger.info(
        "[AIStrategyEngine] game=%s bot=%s turn=%d plan=%s retries=%d fallback=%s",
        game_id,
        bot_player_id,
        turn_number,
        audit.current_plan,
        retries,
        fell_back,
    )
    return TurnResult(
        success=execution.success,
        audit=audit,
        retries_used=retries,
        fell_back_to_pass=fell_back,
    )


async def place_initial_train(
    gateway: GameGateway,
    board: BoardCatalog,
    game_id: str,
    bot_player_id: str,
    bot_user_id: str,
) -> Tuple[int, int, str]:
    """
    开局放置列车：选择中心点离手牌需求城市最近的主要城市

    每座主要城市得分 = Σ 1 / (1 + |Δrow| + |Δcol|)，对每条需求取其城市的第一个 milepost。

    Returns:
        (row, col, city_name)

    Raises:
        NotFoundError: 游戏 / bot 玩家不存在，或地图没有主要城市
    """
    game = await gateway.get_game(game_id, bot_user_id)
    if game is None:
        raise NotFoundError(f"Game not found: {game_id}")
    bot = next((p for p in game.players if p.id == bot_player_id), None)
    if bot is None:
        raise NotFoundError(f"Bot player not found: {bot_player_id} in game {game_id}")
    if not board.major_cities:
        raise NotFoundError("Board has no major cities")

    demand_points = []
    for card in bot.hand:
        for demand in card.demands:
            mileposts = board.city_mileposts(demand.city)
            if mileposts:
                demand_points.append(mileposts[0])

    best = board.major_cities[0]
    best_score = -1.0
    for group in board.major_cities:
        center = group.center
        total = sum(
            1 / (1 + abs(center.row - p.row) + abs(center.col - p.col))
            for p in demand_points
        )
        if total > best_score:
            best, best_score = group, total

    await gateway.set_train_position(game_id, bot_player_id, best.center)
    logger.info(
        "[AIStrategyEngine] game=%s bot=%s 列车放置于 %s (%d, %d)",
        game_id,
        bot_player_id,
        best.city_name,
        best.center.row,
        best.center.col,
    )
    return best.center.row, best.center.col, best.city_name
