"""
InMemoryGameGateway：GameGateway 的内存实现

用于本地运行与集成测试。所有写操作在 asyncio.Lock 下串行；
transaction() 在状态副本上执行，正常退出时整体换入，异常时丢弃副本（回滚）。
"""
from __future__ import annotations

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from railbot.ai.rules import find_upgrade
from railbot.errors import GameRuleError, NotFoundError
from railbot.models.audit import StrategyAudit
from railbot.models.board import Point
from railbot.models.game import (
    DroppedLoad,
    GameRecord,
    PlayerRecord,
    PlayerTrackState,
    TrainState,
    TrainType,
)

logger = logging.getLogger(__name__)

TrackKey = Tuple[str, str]


class _StoreState:
    """可整体深拷贝的存储状态。"""

    def __init__(self) -> None:
        self.games: Dict[str, GameRecord] = {}
        self.tracks: Dict[TrackKey, PlayerTrackState] = {}
        self.city_loads: Dict[str, List[str]] = {}
        self.dropped: Dict[str, List[DroppedLoad]] = {}

    def find_player_by_user(self, game_id: str, user_id: str) -> PlayerRecord:
        game = self.games.get(game_id)
        if game is None:
            raise NotFoundError(f"Game not found: {game_id}")
        for player in game.players:
            if player.user_id == user_id:
                return player
        raise NotFoundError(f"Player not found for user {user_id} in game {game_id}")

    def find_player(self, game_id: str, player_id: str) -> PlayerRecord:
        game = self.games.get(game_id)
        if game is None:
            raise NotFoundError(f"Game not found: {game_id}")
        for player in game.players:
            if player.id == player_id:
                return player
        raise NotFoundError(f"Player not found: {player_id} in game {game_id}")


class InMemoryTransaction:
    def __init__(self, state: _StoreState) -> None:
        self._state = state

    async def get_track_state(self, game_id: str, player_id: str) -> Optional[PlayerTrackState]:
        return self._state.tracks.get((game_id, player_id))

    async def upsert_track_state(self, track: PlayerTrackState) -> None:
        self._state.tracks[(track.game_id, track.player_id)] = track

    async def adjust_money(self, game_id: str, user_id: str, delta: int) -> int:
        player = self._state.find_player_by_user(game_id, user_id)
        if player.money + delta < 0:
            raise GameRuleError(f"资金不足: 需要 {-delta}M, 现有 {player.money}M")
        player.money += delta
        return player.money

    async def get_player_loads(self, game_id: str, user_id: str) -> List[str]:
        player = self._state.find_player_by_user(game_id, user_id)
        return list(player.train_state.loads) if player.train_state else []

    async def set_player_loads(self, game_id: str, user_id: str, loads: List[str]) -> None:
        player = self._state.find_player_by_user(game_id, user_id)
        if player.train_state is None:
            player.train_state = TrainState()
        player.train_state.loads = list(loads)


class InMemoryGameGateway:
    """进程内游戏状态存储。"""

    def __init__(self) -> None:
        self._state = _StoreState()
        self._audits: Dict[TrackKey, List[StrategyAudit]] = {}
        self._lock = asyncio.Lock()
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []

    # =========================================================================
    # 初始化数据
    # =========================================================================

    def add_game(self, game: GameRecord) -> None:
        self._state.games[game.id] = game.model_copy(deep=True)

    def set_track_state(self, track: PlayerTrackState) -> None:
        self._state.tracks[(track.game_id, track.player_id)] = track

    def set_city_loads(self, city: str, loads: List[str]) -> None:
        self._state.city_loads[city] = list(loads)

    def add_dropped_load(self, game_id: str, load: DroppedLoad) -> None:
        self._state.dropped.setdefault(game_id, []).append(load)

    # =========================================================================
    # 读取
    # =========================================================================

    async def get_game(self, game_id: str, user_id: str) -> Optional[GameRecord]:
        game = self._state.games.get(game_id)
        return game.model_copy(deep=True) if game else None

    async def get_all_tracks(self, game_id: str) -> List[PlayerTrackState]:
        return [track for (gid, _), track in self._state.tracks.items() if gid == game_id]

    async def get_track_state(self, game_id: str, player_id: str) -> Optional[PlayerTrackState]:
        return self._state.tracks.get((game_id, player_id))

    async def get_available_loads_for_city(self, city: str) -> List[str]:
        return list(self._state.city_loads.get(city, []))

    async def get_dropped_loads(self, game_id: str) -> List[DroppedLoad]:
        return list(self._state.dropped.get(game_id, []))

    # =========================================================================
    # 货物
    # =========================================================================

    async def pickup_dropped_load(self, city: str, load_type: str, game_id: str) -> None:
        async with self._lock:
            dropped = self._state.dropped.get(game_id, [])
            for index, load in enumerate(dropped):
                if load.city_name == city and load.type == load_type:
                    del dropped[index]
                    return
            raise GameRuleError(f"{load_type} 未掉落在 {city}")

    async def return_load(self, city: str, load_type: str, game_id: str) -> None:
        async with self._lock:
            self._state.city_loads.setdefault(city, []).append(load_type)

    # =========================================================================
    # 玩家动作
    # =========================================================================

    async def move_train_for_user(self, game_id: str, user_id: str, to: Point, movement_cost: int) -> None:
        async with self._lock:
            player = self._state.find_player_by_user(game_id, user_id)
            train = player.train_state
            if train is None or train.position is None:
                raise GameRuleError("列车尚未放置")
            if train.remaining_movement < movement_cost:
                raise GameRuleError(
                    f"移动力不足: 需要 {movement_cost}, 剩余 {train.remaining_movement}"
                )
            train.position = Point(row=to.row, col=to.col, x=to.x, y=to.y)
            train.remaining_movement -= movement_cost

    async def deliver_load_for_user(
        self,
        game_id: str,
        user_id: str,
        city: str,
        load_type: str,
        demand_card_id: int,
    ) -> int:
        async with self._lock:
            player = self._state.find_player_by_user(game_id, user_id)
            loads = player.train_state.loads if player.train_state else []
            if load_type not in loads:
                raise GameRuleError(f"未携带货物 {load_type}")
            card = next((c for c in player.hand if c.id == demand_card_id), None)
            if card is None:
                raise GameRuleError(f"需求卡 {demand_card_id} 不在手牌中")
            demand = next(
                (d for d in card.demands if d.city == city and d.resource == load_type),
                None,
            )
            if demand is None:
                raise GameRuleError(f"需求卡 {demand_card_id} 没有 {city} 的 {load_type} 需求")
            loads.remove(load_type)
            player.hand = [c for c in player.hand if c.id != demand_card_id]
            player.money += demand.payment
            logger.info("送货完成: game=%s user=%s %s -> %s (+%dM)", game_id, user_id, load_type, city, demand.payment)
            return demand.payment

    async def purchase_train_type(self, game_id: str, user_id: str, kind: str, target_train_type: TrainType) -> None:
        async with self._lock:
            player = self._state.find_player_by_user(game_id, user_id)
            path = find_upgrade(player.train_type, target_train_type)
            if path is None or path.kind != kind:
                raise GameRuleError(f"无效的列车变更: {player.train_type} -> {target_train_type} ({kind})")
            if player.money < path.cost:
                raise GameRuleError(f"资金不足: 需要 {path.cost}M, 现有 {player.money}M")
            player.money -= path.cost
            player.train_type = TrainType(target_train_type)

    async def set_train_position(self, game_id: str, player_id: str, position: Point) -> None:
        async with self._lock:
            player = self._state.find_player(game_id, player_id)
            if player.train_state is None:
                player.train_state = TrainState()
            player.train_state.position = position

    # =========================================================================
    # 事务
    # =========================================================================

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[InMemoryTransaction]:
        async with self._lock:
            working = copy.deepcopy(self._state)
            yield InMemoryTransaction(working)
            # 正常退出才换入；异常会在 yield 处抛出，副本被丢弃
            self._state = working

    # =========================================================================
    # 审计 / 通知
    # =========================================================================

    async def save_turn_audit(self, game_id: str, bot_player_id: str, audit: StrategyAudit) -> None:
        self._audits.setdefault((game_id, bot_player_id), []).append(audit)

    async def get_latest_turn_audit(self, game_id: str, bot_player_id: str) -> Optional[StrategyAudit]:
        audits = self._audits.get((game_id, bot_player_id))
        return audits[-1] if audits else None

    async def emit_to_game(self, game_id: str, event_name: str, payload: Dict[str, Any]) -> None:
        self.events.append((game_id, event_name, payload))
