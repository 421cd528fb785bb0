import pytest

from railbot.ai.option_generator import generate
from railbot.ai.profiles import get_archetype_profile, get_skill_profile
from railbot.ai.scorer import evaluate_dimensions, final_weights, score
from railbot.models.options import ActionType, pass_turn_option
from railbot.models.profiles import ALL_DIMENSIONS, BotConfig


def test_final_weights_multiply_skill_and_archetype():
    weights = final_weights(BotConfig(skill_level="medium", archetype="freight_optimizer"))

    assert weights["income_per_milepost"] == pytest.approx(0.7 * 2.0)
    assert weights["risk_exposure"] == pytest.approx(0.4)
    assert set(weights) == set(ALL_DIMENSIONS)


def test_pass_turn_scores_only_risk(make_snapshot):
    config = BotConfig(skill_level="medium", archetype="backbone_builder")

    [scored] = score([pass_turn_option()], make_snapshot(), config)

    assert scored.score == pytest.approx(0.04)
    assert scored.rationale == "risk_exposure:0.04"


def test_dimension_values_are_clamped(make_snapshot):
    snapshot = make_snapshot(money=10_000)

    for option in generate(snapshot).feasible:
        values = evaluate_dimensions(option, snapshot)
        assert set(values) == set(ALL_DIMENSIONS)
        assert all(0.0 <= v <= 1.0 for v in values.values())


def test_scores_sorted_descending_and_deterministic(make_snapshot):
    snapshot = make_snapshot()
    config = BotConfig(skill_level="hard", archetype="opportunist")
    options = generate(snapshot).feasible

    first = score(options, snapshot, config)
    second = score(options, snapshot, config)

    assert [o.score for o in first] == sorted((o.score for o in first), reverse=True)
    assert [(o.description, o.score) for o in first] == [(o.description, o.score) for o in second]
    assert len(first) == len(options)


def test_ties_keep_generation_order(make_snapshot):
    config = BotConfig()
    options = [pass_turn_option("first"), pass_turn_option("second")]

    scored = score(options, make_snapshot(), config)

    assert [o.description for o in scored] == ["first", "second"]


def test_delivery_outscores_passing(make_snapshot):
    snapshot = make_snapshot()
    scored = score(generate(snapshot).feasible, snapshot, BotConfig(archetype="freight_optimizer"))

    ranks = {o.type: i for i, o in reversed(list(enumerate(scored)))}
    assert ranks[ActionType.DELIVER_LOAD] < ranks[ActionType.PASS_TURN]


def test_scored_option_keeps_params(make_snapshot):
    snapshot = make_snapshot()
    options = generate(snapshot).feasible

    for scored in score(options, snapshot, BotConfig()):
        assert scored.params.type == scored.type.value
        assert scored.rationale


def test_unknown_profiles_raise():
    with pytest.raises(ValueError):
        get_skill_profile("nightmare")
    with pytest.raises(ValueError):
        get_archetype_profile("hoarder")


def test_profiles_change_scores_for_same_options(make_snapshot):
    snapshot = make_snapshot()
    options = generate(snapshot).feasible

    easy = score(options, snapshot, BotConfig(skill_level="easy", archetype="backbone_builder"))
    hard = score(options, snapshot, BotConfig(skill_level="hard", archetype="freight_optimizer"))

    assert {o.description for o in easy} == {o.description for o in hard}
    assert {o.description: o.score for o in easy} != {o.description: o.score for o in hard}
