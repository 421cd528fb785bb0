"""
协作方读写契约

bot 流水线只通过这里声明的异步接口读写游戏状态；
持久化引擎本身由实现方提供（见 memory_gateway.InMemoryGameGateway）。
"""
from __future__ import annotations

from typing import Any, AsyncContextManager, Dict, List, Optional, Protocol, runtime_checkable

from railbot.models.audit import StrategyAudit
from railbot.models.board import Point
from railbot.models.game import DroppedLoad, GameRecord, PlayerTrackState, TrainType


@runtime_checkable
class StoreTransaction(Protocol):
    """单个事务内可用的读写操作。退出 async with 时提交，异常时整体回滚。"""

    async def get_track_state(self, game_id: str, player_id: str) -> Optional[PlayerTrackState]: ...

    async def upsert_track_state(self, track: PlayerTrackState) -> None: ...

    async def adjust_money(self, game_id: str, user_id: str, delta: int) -> int: ...

    async def get_player_loads(self, game_id: str, user_id: str) -> List[str]: ...

    async def set_player_loads(self, game_id: str, user_id: str, loads: List[str]) -> None: ...


@runtime_checkable
class GameGateway(Protocol):
    # ===== 读取 =====

    async def get_game(self, game_id: str, user_id: str) -> Optional[GameRecord]: ...

    async def get_all_tracks(self, game_id: str) -> List[PlayerTrackState]: ...

    async def get_track_state(self, game_id: str, player_id: str) -> Optional[PlayerTrackState]: ...

    async def get_available_loads_for_city(self, city: str) -> List[str]: ...

    async def get_dropped_loads(self, game_id: str) -> List[DroppedLoad]: ...

    # ===== 货物 =====

    async def pickup_dropped_load(self, city: str, load_type: str, game_id: str) -> None: ...

    async def return_load(self, city: str, load_type: str, game_id: str) -> None: ...

    # ===== 玩家动作 =====

    async def move_train_for_user(self, game_id: str, user_id: str, to: Point, movement_cost: int) -> None: ...

    async def deliver_load_for_user(
        self,
        game_id: str,
        user_id: str,
        city: str,
        load_type: str,
        demand_card_id: int,
    ) -> int: ...

    async def purchase_train_type(self, game_id: str, user_id: str, kind: str, target_train_type: TrainType) -> None: ...

    async def set_train_position(self, game_id: str, player_id: str, position: Point) -> None: ...

    # ===== 事务 =====

    def transaction(self) -> AsyncContextManager[StoreTransaction]: ...

    # ===== 审计 / 通知 =====

    async def save_turn_audit(self, game_id: str, bot_player_id: str, audit: StrategyAudit) -> None: ...

    async def get_latest_turn_audit(self, game_id: str, bot_player_id: str) -> Optional[StrategyAudit]: ...

    async def emit_to_game(self, game_id: str, event_name: str, payload: Dict[str, Any]) -> None: ...
