"""
WorldSnapshotService：为一次 bot 回合捕获只读世界快照
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List

from railbot.ai.reachability import ReachabilityGraph
from railbot.errors import NotFoundError
from railbot.models.board import BoardCatalog
from railbot.models.game import PlayerRecord, PlayerTrackState
from railbot.models.snapshot import OpponentSummary, WorldSnapshot
from railbot.services.gateway import GameGateway

logger = logging.getLogger(__name__)


def _count_connected_major_cities(track: PlayerTrackState | None, board: BoardCatalog) -> int:
    if track is None or not track.segments:
        return 0
    return ReachabilityGraph.from_segments(track.segments, board).connected_major_city_count()


def _summarize_opponent(
    player: PlayerRecord,
    track: PlayerTrackState | None,
    board: BoardCatalog,
) -> OpponentSummary:
    train = player.train_state
    return OpponentSummary(
        player_id=player.id,
        name=player.name,
        money=player.money,
        train_type=player.train_type,
        position=train.position if train else None,
        loads=tuple(train.loads) if train else (),
        track_segment_count=len(track.segments) if track else 0,
        major_cities_connected=_count_connected_major_cities(track, board),
    )


async def _collect_load_availability(gateway: GameGateway, board: BoardCatalog) -> Dict[str, tuple]:
    """扫描一次所有命名城市；没有库存的城市不出现在结果中。"""
    availability: Dict[str, tuple] = {}
    for city in board.city_names():
        loads = await gateway.get_available_loads_for_city(city)
        if loads:
            availability[city] = tuple(loads)
    return availability


async def _collect_dropped_loads(gateway: GameGateway, game_id: str) -> Dict[str, tuple]:
    grouped: Dict[str, List[str]] = {}
    for dropped in await gateway.get_dropped_loads(game_id):
        grouped.setdefault(dropped.city_name, []).append(dropped.type)
    return {city: tuple(loads) for city, loads in grouped.items()}


async def capture(
    gateway: GameGateway,
    board: BoardCatalog,
    game_id: str,
    bot_player_id: str,
    bot_user_id: str,
) -> WorldSnapshot:
    """
    捕获快照

    Raises:
        NotFoundError: 游戏或 bot 玩家记录不存在
    """
    game, all_tracks = await asyncio.gather(
        gateway.get_game(game_id, bot_user_id),
        gateway.get_all_tracks(game_id),
    )
    if game is None:
        raise NotFoundError(f"Game not found: {game_id}")

    bot = next((p for p in game.players if p.id == bot_player_id), None)
    if bot is None:
        raise NotFoundError(f"Bot player not found: {bot_player_id} in game {game_id}")

    tracks_by_player = {t.player_id: t for t in all_tracks}
    bot_track = tracks_by_player.get(bot_player_id)
    train = bot.train_state

    opponents = tuple(
        _summarize_opponent(p, tracks_by_player.get(p.id), board)
        for p in game.players
        if p.id != bot_player_id
    )

    load_availability = await _collect_load_availability(gateway, board)
    dropped_loads = await _collect_dropped_loads(gateway, game_id)

    snapshot = WorldSnapshot(
        game_id=game_id,
        bot_player_id=bot_player_id,
        bot_user_id=bot_user_id,
        game_phase="initialBuild" if game.status == "initialBuild" else "active",
        turn_build_cost_so_far=bot_track.turn_build_cost if bot_track else 0,
        position=train.position if train else None,
        money=bot.money,
        debt_owed=bot.debt_owed,
        train_type=bot.train_type,
        remaining_movement=train.remaining_movement if train else 0,
        carried_loads=tuple(train.loads) if train else (),
        demand_cards=tuple(bot.hand),
        track_segments=bot_track.segments if bot_track else (),
        connected_major_cities=_count_connected_major_cities(bot_track, board),
        opponents=opponents,
        all_player_tracks=tuple(all_tracks),
        load_availability=load_availability,
        dropped_loads=dropped_loads,
        board=board,
        active_events=(),
    )
    logger.debug(
        "[WorldSnapshot] game=%s bot=%s money=%d loads=%d segments=%d",
        game_id,
        bot_player_id,
        snapshot.money,
        len(snapshot.carried_loads),
        len(snapshot.track_segments),
    )
    return snapshot
