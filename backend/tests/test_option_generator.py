from railbot.ai.option_generator import NO_POSITION_REASON, generate
from railbot.models.game import Demand, DemandCard, TrainType
from railbot.models.options import ActionType


def _of_type(options, action):
    return [o for o in options if o.type == action]


def test_exactly_one_pass_turn_always_last(make_snapshot):
    result = generate(make_snapshot())

    passes = _of_type(result.feasible, ActionType.PASS_TURN)
    assert len(passes) == 1
    assert result.feasible[-1].type == ActionType.PASS_TURN


def test_delivery_options_follow_carried_loads(make_snapshot):
    result = generate(make_snapshot())

    deliveries = _of_type(result.feasible, ActionType.DELIVER_LOAD)
    assert len(deliveries) == 1
    params = deliveries[0].params
    assert params.city == "Beta"
    assert params.load_type == "Coal"
    assert (params.demand_card_id, params.demand_index) == (2, 0)
    assert len(params.move_path) == 6
    assert params.move_path[0].coord == (2, 3)

    rejected = _of_type(result.infeasible, ActionType.DELIVER_LOAD)
    assert [o.reason for o in rejected] == ["Cannot reach Dune within 9 movement"]


def test_no_position_rejects_deliveries_and_skips_pickups(make_snapshot):
    result = generate(make_snapshot(position=None))

    assert _of_type(result.feasible, ActionType.DELIVER_LOAD) == []
    assert _of_type(result.feasible, ActionType.PICKUP_AND_DELIVER) == []
    assert _of_type(result.infeasible, ActionType.PICKUP_AND_DELIVER) == []
    assert {o.reason for o in _of_type(result.infeasible, ActionType.DELIVER_LOAD)} == {NO_POSITION_REASON}


def test_unreachable_pickups_are_rejected_with_reason(make_snapshot):
    result = generate(make_snapshot())

    rejected = _of_type(result.infeasible, ActionType.PICKUP_AND_DELIVER)
    # Wine 在 Dune 掉落，Fish / Oil 在 Cork 有库存，均不可达；Iron 无处可取
    assert len(rejected) == 3
    assert all(o.reason.startswith("Cannot reach") for o in rejected)


def test_pickup_with_same_turn_delivery(make_snapshot, make_track):
    cards = (
        DemandCard(id=7, demands=(Demand(city="Alpha", resource="Fish", payment=15),)),
        DemandCard(id=8, demands=(Demand(city="Beta", resource="Fish", payment=20),)),
    )
    snapshot = make_snapshot(
        carried_loads=(),
        demand_cards=cards,
        track_segments=make_track([(2, 3), (2, 4), (1, 4), (0, 5)]),
        opponent_segments=(),
    )

    pickups = _of_type(generate(snapshot).feasible, ActionType.PICKUP_AND_DELIVER)

    by_city = {o.params.deliver_city: o.params for o in pickups}
    assert set(by_city) == {"Alpha", "Beta"}
    assert by_city["Alpha"].pickup_city == "Cork"
    assert len(by_city["Alpha"].pickup_path) == 4
    assert by_city["Alpha"].deliver_path[-1].coord == (2, 3)
    # Beta 不可达：只取货
    assert by_city["Beta"].deliver_path == ()


def test_full_train_generates_no_pickups(make_snapshot):
    result = generate(make_snapshot(carried_loads=("Coal", "Steel")))

    assert _of_type(result.feasible, ActionType.PICKUP_AND_DELIVER) == []
    assert _of_type(result.infeasible, ActionType.PICKUP_AND_DELIVER) == []


def test_build_options_toward_unconnected_cities(make_snapshot):
    result = generate(make_snapshot())

    builds = _of_type(result.feasible, ActionType.BUILD_TRACK)
    targets = {o.description.split(" (")[0] for o in builds}
    assert "Build track toward Beta" in targets
    assert "Build track toward Dune" in targets
    for option in builds:
        assert option.params.segments
        assert 0 < option.params.total_cost <= 20
        assert option.params.total_cost == sum(s.cost for s in option.params.segments)

    toward = _of_type(result.feasible, ActionType.BUILD_TOWARD_MAJOR_CITY)
    assert [o.params.target_city for o in toward] == ["Beta"]


def test_build_never_reuses_opponent_edges(make_snapshot):
    result = generate(make_snapshot())

    opponent_edges = {frozenset(((2, 6), (2, 7))), frozenset(((2, 7), (2, 8)))}
    for option in _of_type(result.feasible, ActionType.BUILD_TOWARD_MAJOR_CITY):
        for seg in option.params.segments:
            edge = frozenset(((seg.from_.row, seg.from_.col), (seg.to.row, seg.to.col)))
            assert edge not in opponent_edges


def test_exhausted_turn_budget_blocks_builds_and_upgrades(make_snapshot):
    result = generate(make_snapshot(turn_build_cost_so_far=20))

    assert _of_type(result.feasible, ActionType.BUILD_TRACK) == []
    assert _of_type(result.feasible, ActionType.BUILD_TOWARD_MAJOR_CITY) == []
    assert _of_type(result.feasible, ActionType.UPGRADE_TRAIN) == []
    reasons = {o.reason for o in _of_type(result.infeasible, ActionType.UPGRADE_TRAIN)}
    assert reasons == {"Upgrade cost 20M exceeds remaining turn budget 0M"}


def test_upgrade_options_and_funds(make_snapshot):
    rich = generate(make_snapshot())
    targets = {o.params.target_train_type for o in _of_type(rich.feasible, ActionType.UPGRADE_TRAIN)}
    assert targets == {TrainType.FAST_FREIGHT, TrainType.HEAVY_FREIGHT}

    poor = generate(make_snapshot(money=10))
    assert _of_type(poor.feasible, ActionType.UPGRADE_TRAIN) == []
    reasons = {o.reason for o in _of_type(poor.infeasible, ActionType.UPGRADE_TRAIN)}
    assert reasons == {"Insufficient funds: need 20M, have 10M"}


def test_crossgrade_is_cheap(make_snapshot):
    result = generate(make_snapshot(train_type=TrainType.FAST_FREIGHT))

    upgrades = {o.params.target_train_type: o for o in _of_type(result.feasible, ActionType.UPGRADE_TRAIN)}
    assert upgrades[TrainType.HEAVY_FREIGHT].params.kind == "crossgrade"
    assert upgrades[TrainType.HEAVY_FREIGHT].params.cost == 5
    assert upgrades[TrainType.HEAVY_FREIGHT].description == "Crossgrade to heavy_freight (5M)"
    assert upgrades[TrainType.SUPERFREIGHT].params.kind == "upgrade"


def test_initial_build_phase_only_builds(make_snapshot):
    result = generate(make_snapshot(game_phase="initialBuild"))

    kinds = {o.type for o in result.feasible}
    assert kinds <= {ActionType.BUILD_TRACK, ActionType.BUILD_TOWARD_MAJOR_CITY, ActionType.PASS_TURN}
    assert ActionType.BUILD_TOWARD_MAJOR_CITY in kinds


def test_every_infeasible_option_has_reason(make_snapshot):
    result = generate(make_snapshot(money=3, turn_build_cost_so_far=0))

    assert result.infeasible
    assert all(o.reason for o in result.infeasible)


def test_train_on_city_center_reaches_track_from_outpost(make_snapshot, point):
    # 列车在 Alpha 中心 (2,2)，自己的轨道从外围点 (2,3) 起
    result = generate(make_snapshot(position=point(2, 2)))

    [delivery] = _of_type(result.feasible, ActionType.DELIVER_LOAD)
    assert delivery.params.city == "Beta"
    assert [p.coord for p in delivery.params.move_path[:2]] == [(2, 2), (2, 3)]
    assert len(delivery.params.move_path) == 7


def test_pickup_routes_start_from_city_center(make_snapshot, make_track, point):
    snapshot = make_snapshot(
        position=point(2, 2),
        track_segments=make_track([(2, 3), (2, 4), (1, 4), (0, 5)]),
        opponent_segments=(),
    )

    pickups = _of_type(generate(snapshot).feasible, ActionType.PICKUP_AND_DELIVER)

    cork = [o.params for o in pickups if o.params.pickup_city == "Cork"]
    assert {p.pickup_load_type for p in cork} == {"Fish", "Oil"}
    assert all(len(p.pickup_path) == 5 for p in cork)
    assert all(p.pickup_path[0].coord == (2, 2) for p in cork)
