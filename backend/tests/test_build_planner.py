from railbot.ai.build_planner import BuildPlanner, hex_neighbors, segments_cost


def _edges(segments):
    return {frozenset(((s.from_.row, s.from_.col), (s.to.row, s.to.col))) for s in segments}


def test_hex_neighbors_even_and_odd_rows():
    assert set(hex_neighbors(2, 4)) == {(2, 3), (2, 5), (1, 3), (1, 4), (3, 3), (3, 4)}
    assert set(hex_neighbors(3, 4)) == {(3, 3), (3, 5), (2, 4), (2, 5), (4, 4), (4, 5)}


def test_plan_from_train_position_without_network(board):
    planner = BuildPlanner(board, own_segments=(), start_position=(2, 3))

    segments = planner.plan([(4, 5)], budget=20)

    assert len(segments) == 3
    assert segments_cost(segments) == 5
    assert (segments[0].from_.row, segments[0].from_.col) == (2, 3)
    assert (segments[-1].to.row, segments[-1].to.col) == (4, 5)
    # 进入中等城市 3M
    assert segments[-1].cost == 3


def test_plan_respects_budget(board):
    planner = BuildPlanner(board, own_segments=(), start_position=(2, 3))

    assert planner.plan([(4, 5)], budget=4) == ()
    assert planner.plan([(4, 5)], budget=0) == ()


def test_plan_extends_existing_network_without_rebuilding(board, make_track):
    own = make_track([(2, 3), (2, 4)])
    planner = BuildPlanner(board, own_segments=own)

    segments = planner.plan([(4, 5)], budget=20)

    assert segments_cost(segments) == 4
    assert len(segments) == 2
    assert (segments[0].from_.row, segments[0].from_.col) == (2, 4)
    assert not (_edges(segments) & _edges(own))


def test_plan_avoids_edges_owned_by_others(board, make_track):
    own = make_track([(2, 3), (2, 4)])
    occupied = make_track([(2, 4), (3, 4)])
    planner = BuildPlanner(board, own_segments=own, occupied_segments=occupied)

    segments = planner.plan([(4, 5)], budget=20)

    assert segments_cost(segments) == 5
    assert frozenset(((2, 4), (3, 4))) not in _edges(segments)


def test_target_already_in_network_needs_no_build(board, make_track):
    planner = BuildPlanner(board, own_segments=make_track([(2, 3), (2, 4)]))

    assert planner.plan([(2, 4)], budget=20) == ()


def test_water_is_impassable(board):
    planner = BuildPlanner(board, own_segments=(), start_position=(2, 3))

    assert (5, 3) not in planner.graph
    assert planner.plan([(5, 3)], budget=20) == ()


def test_cheapest_of_several_targets_wins(board):
    planner = BuildPlanner(board, own_segments=(), start_position=(2, 3))

    # Dune 需要 5M，(2,4) 只需 1M
    segments = planner.plan([(4, 5), (2, 4)], budget=20)

    assert len(segments) == 1
    assert (segments[0].to.row, segments[0].to.col) == (2, 4)


def test_ferry_port_uses_ferry_cost(board):
    planner = BuildPlanner(board, own_segments=(), start_position=(4, 9))

    segments = planner.plan([(4, 11)], budget=20)

    assert [s.cost for s in segments] == [1, 6]


def test_sources_fall_back_to_major_city_mileposts(board):
    planner = BuildPlanner(board, own_segments=())

    assert (2, 2) in planner.sources
    assert (2, 9) in planner.sources
    assert planner.plan([(2, 4)], budget=20)[0].cost == 1
