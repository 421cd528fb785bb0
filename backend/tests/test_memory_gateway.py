import pytest

from railbot.errors import GameRuleError, NotFoundError
from railbot.models.game import TrainType
from railbot.services.gateway import GameGateway, StoreTransaction
from railbot.services.memory_gateway import InMemoryGameGateway

from conftest import BOT_ID, BOT_USER, GAME_ID


async def _money(gateway, player_id=BOT_ID):
    game = await gateway.get_game(GAME_ID, BOT_USER)
    return next(p for p in game.players if p.id == player_id).money


def test_implements_gateway_protocol():
    assert isinstance(InMemoryGameGateway(), GameGateway)


@pytest.mark.asyncio
async def test_transaction_commits_on_success(gateway):
    async with gateway.transaction() as tx:
        assert isinstance(tx, StoreTransaction)
        assert await tx.adjust_money(GAME_ID, BOT_USER, -10) == 40

    assert await _money(gateway) == 40


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error(gateway):
    with pytest.raises(RuntimeError, match="abort"):
        async with gateway.transaction() as tx:
            await tx.adjust_money(GAME_ID, BOT_USER, -10)
            await tx.set_player_loads(GAME_ID, BOT_USER, [])
            raise RuntimeError("abort")

    assert await _money(gateway) == 50
    game = await gateway.get_game(GAME_ID, BOT_USER)
    assert next(p for p in game.players if p.id == BOT_ID).train_state.loads == ["Coal"]


@pytest.mark.asyncio
async def test_adjust_money_refuses_negative_balance(gateway):
    with pytest.raises(GameRuleError):
        async with gateway.transaction() as tx:
            await tx.adjust_money(GAME_ID, BOT_USER, -51)

    assert await _money(gateway) == 50


@pytest.mark.asyncio
async def test_get_game_returns_copy(gateway):
    game = await gateway.get_game(GAME_ID, BOT_USER)
    game.players[0].money = 0

    assert await _money(gateway) == 50
    assert await gateway.get_game("other", BOT_USER) is None


@pytest.mark.asyncio
async def test_move_requires_movement(gateway, point):
    await gateway.move_train_for_user(GAME_ID, BOT_USER, point(2, 4), 9)

    with pytest.raises(GameRuleError):
        await gateway.move_train_for_user(GAME_ID, BOT_USER, point(2, 5), 1)


@pytest.mark.asyncio
async def test_deliver_validates_card_and_load(gateway):
    with pytest.raises(GameRuleError):
        await gateway.deliver_load_for_user(GAME_ID, BOT_USER, "Beta", "Wine", 1)
    with pytest.raises(GameRuleError):
        await gateway.deliver_load_for_user(GAME_ID, BOT_USER, "Beta", "Coal", 99)
    with pytest.raises(GameRuleError):
        await gateway.deliver_load_for_user(GAME_ID, BOT_USER, "Cork", "Coal", 2)

    assert await gateway.deliver_load_for_user(GAME_ID, BOT_USER, "Dune", "Coal", 1) == 12
    assert await _money(gateway) == 62


@pytest.mark.asyncio
async def test_purchase_train_type(gateway):
    with pytest.raises(GameRuleError):
        await gateway.purchase_train_type(GAME_ID, BOT_USER, "crossgrade", TrainType.FAST_FREIGHT)

    await gateway.purchase_train_type(GAME_ID, BOT_USER, "upgrade", TrainType.HEAVY_FREIGHT)

    game = await gateway.get_game(GAME_ID, BOT_USER)
    bot = next(p for p in game.players if p.id == BOT_ID)
    assert bot.train_type == TrainType.HEAVY_FREIGHT
    assert bot.money == 30


@pytest.mark.asyncio
async def test_dropped_loads(gateway):
    with pytest.raises(GameRuleError):
        await gateway.pickup_dropped_load("Cork", "Wine", GAME_ID)

    await gateway.pickup_dropped_load("Dune", "Wine", GAME_ID)

    assert await gateway.get_dropped_loads(GAME_ID) == []


@pytest.mark.asyncio
async def test_unknown_player_raises_not_found(gateway, point):
    with pytest.raises(NotFoundError):
        await gateway.set_train_position(GAME_ID, "ghost", point(0, 0))
    with pytest.raises(NotFoundError):
        await gateway.move_train_for_user(GAME_ID, "ghost-user", point(0, 0), 1)


@pytest.mark.asyncio
async def test_audits_and_events(gateway):
    assert await gateway.get_latest_turn_audit(GAME_ID, BOT_ID) is None

    await gateway.emit_to_game(GAME_ID, "bot:turn-start", {"botPlayerId": BOT_ID})

    assert gateway.events == [(GAME_ID, "bot:turn-start", {"botPlayerId": BOT_ID})]
