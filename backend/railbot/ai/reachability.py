"""
ReachabilityGraph：轨道网络连通性与移动可达性

节点为网格坐标 (row, col)，边来源:
  1. 每段轨道一条边（记录所有者）
  2. 同一主要城市的 milepost 两两相连（无所有者）。
     移动图 (from_tracks) 包含每座主要城市的全部 milepost；
     计数图 (from_segments) 只连接已出现在图中的 milepost，没有轨道的城市不构成分量
  3. 渡轮两端都已出现在图中时，两端相连（无所有者）

移动力按 milepost 计数：每条边权重为 1。
"""
from __future__ import annotations

import logging
from itertools import combinations
from typing import Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Set, Tuple

import networkx as nx

from railbot.models.board import BoardCatalog, Coord, Point
from railbot.models.game import PlayerTrackState, TrackSegment

logger = logging.getLogger(__name__)


class Route(NamedTuple):
    """一次可达查询的结果。"""

    city: str
    coord: Coord
    cost: int
    path: Tuple[Coord, ...]


class ReachabilityGraph:
    """由轨道段构造的无向图。构造后不再修改。"""

    def __init__(self, board: BoardCatalog) -> None:
        self.board = board
        self.graph: nx.Graph = nx.Graph()

    # =========================================================================
    # 构造
    # =========================================================================

    @classmethod
    def from_segments(
        cls,
        segments: Iterable[TrackSegment],
        board: BoardCatalog,
        owner_id: Optional[str] = None,
    ) -> "ReachabilityGraph":
        """单个玩家的网络（用于城市计数）。"""
        instance = cls(board)
        instance._add_segments(segments, owner_id)
        instance._add_implicit_edges()
        return instance

    @classmethod
    def from_tracks(
        cls,
        tracks: Iterable[PlayerTrackState],
        board: BoardCatalog,
        extra_segments: Iterable[TrackSegment] = (),
        extra_owner: Optional[str] = None,
    ) -> "ReachabilityGraph":
        """所有玩家轨道的并集（用于移动）。

        extra_segments: 同一计划中前序建造动作将要新增的轨道。
        """
        instance = cls(board)
        for track in tracks:
            instance._add_segments(track.segments, track.player_id)
        instance._add_segments(extra_segments, extra_owner)
        instance._add_implicit_edges(all_city_mileposts=True)
        return instance

    def _add_segments(self, segments: Iterable[TrackSegment], owner_id: Optional[str]) -> None:
        for seg in segments:
            a = (seg.from_.row, seg.from_.col)
            b = (seg.to.row, seg.to.col)
            if a == b:
                continue
            if not self.graph.has_edge(a, b):
                self.graph.add_edge(a, b, weight=1, kind="track", owners=set())
            if owner_id is not None:
                self.graph.edges[a, b]["owners"].add(owner_id)

    def _add_implicit_edges(self, all_city_mileposts: bool = False) -> None:
        present = set(self.graph.nodes)
        for group in self.board.major_cities:
            coords = group.coords if all_city_mileposts else [c for c in group.coords if c in present]
            for a, b in combinations(coords, 2):
                if not self.graph.has_edge(a, b):
                    self.graph.add_edge(a, b, weight=1, kind="city", owners=set())
        for ferry in self.board.ferries:
            a, b = ferry.point_a.coord, ferry.point_b.coord
            if a in present and b in present and not self.graph.has_edge(a, b):
                self.graph.add_edge(a, b, weight=1, kind="ferry", owners=set())

    # =========================================================================
    # 连通性
    # =========================================================================

    def connected_components(self) -> List[FrozenSet[Coord]]:
        """广度优先遍历得到的连通分量，按发现顺序排列。"""
        return [frozenset(c) for c in nx.connected_components(self.graph)]

    def cities_in_component(self, component: Iterable[Coord]) -> List[str]:
        """分量触及的主要城市（按地图顺序去重）。"""
        nodes = set(component)
        return [
            group.city_name
            for group in self.board.major_cities
            if any(coord in nodes for coord in group.coords)
        ]

    def best_component(self) -> FrozenSet[Coord]:
        """城市最多的分量；并列时取先发现者。"""
        best: FrozenSet[Coord] = frozenset()
        best_count = -1
        for component in self.connected_components():
            count = len(self.cities_in_component(component))
            if count > best_count:
                best, best_count = component, count
        return best

    def connected_major_cities(self) -> List[str]:
        return self.cities_in_component(self.best_component())

    def connected_major_city_count(self) -> int:
        return len(self.connected_major_cities())

    # =========================================================================
    # 可达性
    # =========================================================================

    def _distances_from(self, start: Coord, budget: int) -> Tuple[Dict[Coord, int], Dict[Coord, List[Coord]]]:
        if start not in self.graph:
            return {start: 0}, {start: [start]}
        return nx.single_source_dijkstra(self.graph, start, cutoff=budget, weight="weight")

    def reachable_within_budget(self, start: Coord, target_city: str, budget: int) -> Optional[Route]:
        """从 start 到目标城市最近 milepost 的最短路径；超出预算返回 None。"""
        if budget < 0:
            return None
        distances, paths = self._distances_from(start, budget)
        best: Optional[Route] = None
        for point in self.board.city_mileposts(target_city):
            coord = point.coord
            if coord not in distances:
                continue
            cost = int(distances[coord])
            if best is None or cost < best.cost:
                best = Route(target_city, coord, cost, tuple(paths[coord]))
        return best

    def reachable_cities(self, start: Coord, budget: int) -> List[Route]:
        """预算内可达的所有命名城市（每座城市取最近的 milepost）。"""
        if budget < 0:
            return []
        distances, paths = self._distances_from(start, budget)
        routes: Dict[str, Route] = {}
        for coord, cost in distances.items():
            city = self.board.city_at(*coord)
            if city is None:
                continue
            known = routes.get(city)
            if known is None or cost < known.cost:
                routes[city] = Route(city, coord, int(cost), tuple(paths[coord]))
        return sorted(routes.values(), key=lambda r: (r.cost, r.city))

    # =========================================================================
    # 路径辅助
    # =========================================================================

    def opponents_on_path(self, path: Iterable[Coord], player_id: str) -> Set[str]:
        """路径经过的轨道中，属于其他玩家（且不属于自己）的所有者集合。"""
        coords = list(path)
        owners_used: Set[str] = set()
        for a, b in zip(coords, coords[1:]):
            if not self.graph.has_edge(a, b):
                continue
            owners = self.graph.edges[a, b]["owners"]
            if owners and player_id not in owners:
                owners_used.update(owners)
        return owners_used

    def to_points(self, path: Iterable[Coord]) -> Tuple[Point, ...]:
        points = []
        for row, col in path:
            grid_point = self.board.point_at(row, col)
            points.append(grid_point.to_point() if grid_point else Point(row=row, col=col))
        return tuple(points)
