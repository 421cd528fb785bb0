"""
BuildPlanner：六边形网格上的最低造价建轨路径

从 bot 现有网络（多源）出发，在地形造价加权的网格图上做 Dijkstra，
求到目标 milepost 的最便宜延伸，受预算约束。
  - 已建成的自有轨道造价为 0，且不会重复生成轨道段
  - 水域不可通行
  - 其他玩家已占用的边不可建造
"""
from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

import networkx as nx

from railbot.ai.rules import TERRAIN_COSTS
from railbot.models.board import BoardCatalog, Coord, GridPoint, TerrainType
from railbot.models.game import TrackPoint, TrackSegment

logger = logging.getLogger(__name__)


def hex_neighbors(row: int, col: int) -> List[Coord]:
    """偏移坐标下的 6 个相邻格。奇数行上下邻居为 (col, col+1)，偶数行为 (col-1, col)。"""
    neighbors = [(row, col - 1), (row, col + 1)]
    if row % 2 == 1:
        neighbors += [(row - 1, col), (row - 1, col + 1), (row + 1, col), (row + 1, col + 1)]
    else:
        neighbors += [(row - 1, col - 1), (row - 1, col), (row + 1, col - 1), (row + 1, col)]
    return neighbors


def _edge(a: Coord, b: Coord) -> FrozenSet[Coord]:
    return frozenset((a, b))


def _track_point(point: GridPoint) -> TrackPoint:
    return TrackPoint(row=point.row, col=point.col, x=point.x, y=point.y, terrain=point.terrain)


class BuildPlanner:
    """为单个快照构造一次，可对多个目标重复查询。"""

    def __init__(
        self,
        board: BoardCatalog,
        own_segments: Iterable[TrackSegment],
        occupied_segments: Iterable[TrackSegment] = (),
        start_position: Optional[Coord] = None,
    ) -> None:
        self.board = board
        self.network_nodes: Set[Coord] = set()
        self.network_edges: Set[FrozenSet[Coord]] = set()
        for seg in own_segments:
            a, b = (seg.from_.row, seg.from_.col), (seg.to.row, seg.to.col)
            self.network_nodes.update((a, b))
            self.network_edges.add(_edge(a, b))

        occupied = {
            _edge((seg.from_.row, seg.from_.col), (seg.to.row, seg.to.col))
            for seg in occupied_segments
        }
        self._occupied = occupied - self.network_edges
        self.graph = self._build_grid_graph()
        self.sources = self._determine_sources(start_position)
        self._searches: Dict[int, Tuple[Dict[Coord, int], Dict[Coord, List[Coord]]]] = {}

    def entry_cost(self, point: GridPoint) -> int:
        """进入某个 milepost 的建造费用。"""
        if point.terrain == TerrainType.FERRY_PORT:
            ferry = self.board.ferry_at(point.row, point.col)
            if ferry is not None and ferry.cost > 0:
                return ferry.cost
        return TERRAIN_COSTS[point.terrain]

    def _build_grid_graph(self) -> nx.DiGraph:
        graph = nx.DiGraph()
        for point in self.board.points:
            if point.terrain == TerrainType.WATER:
                continue
            graph.add_node(point.coord)
            for coord in hex_neighbors(point.row, point.col):
                neighbor = self.board.point_at(*coord)
                if neighbor is None or neighbor.terrain == TerrainType.WATER:
                    continue
                edge = _edge(point.coord, coord)
                if edge in self._occupied:
                    continue
                weight = 0 if edge in self.network_edges else self.entry_cost(neighbor)
                graph.add_edge(point.coord, coord, weight=weight)
        return graph

    def _determine_sources(self, start_position: Optional[Coord]) -> List[Coord]:
        """有网络时从网络所有节点出发；否则从列车位置，再否则从所有主要城市 milepost。"""
        if self.network_nodes:
            candidates: Iterable[Coord] = sorted(self.network_nodes)
        elif start_position is not None:
            candidates = [start_position]
        else:
            candidates = [coord for group in self.board.major_cities for coord in group.coords]
        return [coord for coord in candidates if coord in self.graph]

    def _search(self, budget: int) -> Tuple[Dict[Coord, int], Dict[Coord, List[Coord]]]:
        cached = self._searches.get(budget)
        if cached is None:
            cached = nx.multi_source_dijkstra(self.graph, self.sources, cutoff=budget, weight="weight")
            self._searches[budget] = cached
        return cached

    def plan(self, targets: Iterable[Coord], budget: int) -> Tuple[TrackSegment, ...]:
        """预算内延伸到任一目标点的最便宜方案。

        任一目标已在网络中、全部不可达或超预算时返回空。
        """
        targets = list(targets)
        if budget <= 0 or not self.sources:
            return ()
        if any(t in self.network_nodes or t in self.sources for t in targets):
            return ()
        distances, paths = self._search(budget)
        best: Optional[Coord] = None
        for target in targets:
            if target in distances and (best is None or distances[target] < distances[best]):
                best = target
        if best is None:
            return ()
        path = paths[best]

        segments = []
        for a, b in zip(path, path[1:]):
            if _edge(a, b) in self.network_edges:
                continue
            from_point = self.board.point_at(*a)
            to_point = self.board.point_at(*b)
            segments.append(
                TrackSegment(
                    from_=_track_point(from_point),
                    to=_track_point(to_point),
                    cost=self.entry_cost(to_point),
                )
            )
        logger.debug("建轨规划: target=%s segments=%d", best, len(segments))
        return tuple(segments)


def segments_cost(segments: Iterable[TrackSegment]) -> int:
    return sum(seg.cost for seg in segments)
