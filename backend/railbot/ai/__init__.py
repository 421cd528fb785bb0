"""
Bot 决策流水线包
"""
from .reachability import ReachabilityGraph, Route
from .build_planner import BuildPlanner
from .victory import VictoryCheck, check_victory_conditions
from .world_snapshot import capture
from .option_generator import generate
from .scorer import score
from .plan_validator import validate_plan
from .turn_executor import execute_plan
from .strategy_engine import MAX_RETRIES, place_initial_train, select_candidate_order, take_turn

__all__ = [
    "ReachabilityGraph",
    "Route",
    "BuildPlanner",
    "VictoryCheck",
    "check_victory_conditions",
    "capture",
    "generate",
    "score",
    "validate_plan",
    "execute_plan",
    # 回合编排
    "MAX_RETRIES",
    "place_initial_train",
    "select_candidate_order",
    "take_turn",
]
