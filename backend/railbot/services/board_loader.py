"""
地图加载器

地图文件为 JSON:
{
  "gridPoints":  [{"Id": "...", "Type": "Major City", "Name": "Paris", "GridX": 10, "GridY": 4}, ...],
  "ferryPoints": [{"Name": "...", "connections": ["id1", "id2"], "cost": 8}, ...]
}
进程内只加载一次（get_board_catalog 带 lru_cache）。
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from railbot.errors import BoardDataError
from railbot.models.board import (
    BoardCatalog,
    CityInfo,
    FerryEdge,
    GridPoint,
    MajorCityGroup,
    TerrainType,
)

logger = logging.getLogger(__name__)

BUILTIN_BOARD_PATH = Path(__file__).resolve().parent.parent / "data" / "board.json"

HORIZONTAL_SPACING = 50
VERTICAL_SPACING = 45
GRID_MARGIN = 120

_TYPE_TO_TERRAIN: Dict[str, TerrainType] = {
    "Clear": TerrainType.CLEAR,
    "Milepost": TerrainType.CLEAR,
    "Mountain": TerrainType.MOUNTAIN,
    "Alpine": TerrainType.ALPINE,
    "Small City": TerrainType.SMALL_CITY,
    "Medium City": TerrainType.MEDIUM_CITY,
    "Major City": TerrainType.MAJOR_CITY,
    "Major City Outpost": TerrainType.MAJOR_CITY,
    "Ferry Port": TerrainType.FERRY_PORT,
    "Water": TerrainType.WATER,
}

_CITY_TYPES = {"Small City", "Medium City", "Major City", "Major City Outpost"}


def _pixel_position(row: int, col: int) -> tuple:
    offset = HORIZONTAL_SPACING / 2 if row % 2 == 1 else 0
    return (
        col * HORIZONTAL_SPACING + GRID_MARGIN + offset,
        row * VERTICAL_SPACING + GRID_MARGIN,
    )


def board_from_records(
    mileposts: Sequence[Dict[str, Any]],
    ferries: Sequence[Dict[str, Any]] = (),
) -> BoardCatalog:
    """把原始 milepost / ferry 记录转换为 BoardCatalog。"""
    if not isinstance(mileposts, (list, tuple)):
        raise BoardDataError("gridPoints 必须是列表")

    points: List[GridPoint] = []
    centers: Dict[str, GridPoint] = {}
    outposts: Dict[str, List[GridPoint]] = {}

    for raw in mileposts:
        if not isinstance(raw, dict) or "Id" not in raw:
            raise BoardDataError(f"milepost 记录缺少 Id: {raw!r}")
        row, col = raw.get("GridY"), raw.get("GridX")
        if not isinstance(row, int) or not isinstance(col, int):
            continue
        raw_type = raw.get("Type") or "Clear"
        terrain = _TYPE_TO_TERRAIN.get(raw_type, TerrainType.CLEAR)
        name = str(raw["Name"]) if raw.get("Name") else None

        city = None
        if raw_type in _CITY_TYPES and name:
            city = CityInfo(name=name, type=terrain)

        x, y = _pixel_position(row, col)
        point = GridPoint(id=str(raw["Id"]), row=row, col=col, x=x, y=y, terrain=terrain, city=city)
        points.append(point)

        if name and raw_type == "Major City":
            centers[name] = point
        elif name and raw_type == "Major City Outpost":
            outposts.setdefault(name, []).append(point)

    major_cities = []
    for name in list(centers) + [n for n in outposts if n not in centers]:
        center = centers.get(name)
        if center is None:
            raise BoardDataError(f"主要城市 {name} 缺少中心点")
        major_cities.append(
            MajorCityGroup(
                city_name=name,
                center=center.to_point(),
                outposts=tuple(p.to_point() for p in outposts.get(name, [])),
            )
        )

    by_id = {p.id: p for p in points}
    ferry_edges = []
    for raw in ferries:
        connections = raw.get("connections") or []
        if len(connections) != 2:
            raise BoardDataError(f"渡轮 {raw.get('Name')} 必须恰好连接两个点")
        a, b = by_id.get(str(connections[0])), by_id.get(str(connections[1]))
        if a is None or b is None:
            logger.warning("渡轮 %s 引用了不存在的 milepost，已跳过", raw.get("Name"))
            continue
        ferry_edges.append(
            FerryEdge(
                name=str(raw.get("Name", "")),
                point_a=a.to_point(),
                point_b=b.to_point(),
                cost=int(raw.get("cost", 0)),
            )
        )

    return BoardCatalog(points=tuple(points), major_cities=tuple(major_cities), ferries=tuple(ferry_edges))


def load_board_catalog(path: Union[str, Path]) -> BoardCatalog:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise BoardDataError(f"地图文件不存在: {path}") from exc
    except json.JSONDecodeError as exc:
        raise BoardDataError(f"地图文件不是合法 JSON: {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise BoardDataError(f"地图文件顶层必须是对象: {path}")

    board = board_from_records(data.get("gridPoints", []), data.get("ferryPoints", []))
    logger.info(
        "地图加载完成: %s (mileposts=%d, major_cities=%d, ferries=%d)",
        path,
        len(board.points),
        len(board.major_cities),
        len(board.ferries),
    )
    return board


@lru_cache()
def get_board_catalog(path: Optional[str] = None) -> BoardCatalog:
    """进程级地图缓存。未指定路径时使用配置路径，再否则使用内置地图。"""
    from railbot.config import settings

    return load_board_catalog(path or settings.board_data_path or BUILTIN_BOARD_PATH)
