"""
Bot audit API routes.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from railbot.dependencies import get_gateway
from railbot.errors import NotFoundError
from railbot.models.audit import StrategyAudit
from railbot.services.gateway import GameGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/games", tags=["Bot Audit"])


def _map_exception_to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


@router.get("/{game_id}/bots/{bot_player_id}/audit")
async def get_latest_audit(
    game_id: str,
    bot_player_id: str,
    gateway: GameGateway = Depends(get_gateway),
) -> StrategyAudit:
    """获取 bot 最近一回合的审计记录"""
    try:
        audit = await gateway.get_latest_turn_audit(game_id, bot_player_id)
    except Exception as exc:
        logger.error("读取审计失败: game=%s bot=%s: %s", game_id, bot_player_id, exc)
        raise _map_exception_to_http(exc) from exc

    if audit is None:
        raise HTTPException(
            status_code=404,
            detail=f"No audit found for bot {bot_player_id} in game {game_id}",
        )
    return audit
