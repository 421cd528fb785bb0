"""
地图拓扑数据模型

Milepost 网格（六边形偏移坐标 row/col）、主要城市组、渡轮连接。
全部为 frozen 模型：地图在进程启动时加载一次，之后只读。
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, PrivateAttr

Coord = Tuple[int, int]


class TerrainType(str, Enum):
    """地形类型"""

    CLEAR = "clear"
    MOUNTAIN = "mountain"
    ALPINE = "alpine"
    SMALL_CITY = "small_city"
    MEDIUM_CITY = "medium_city"
    MAJOR_CITY = "major_city"
    FERRY_PORT = "ferry_port"
    WATER = "water"


CITY_TERRAINS = frozenset({
    TerrainType.SMALL_CITY,
    TerrainType.MEDIUM_CITY,
    TerrainType.MAJOR_CITY,
})


class Point(BaseModel):
    """网格坐标点（x/y 为像素坐标，仅供展示）。"""

    model_config = ConfigDict(frozen=True)

    row: int
    col: int
    x: float = 0
    y: float = 0

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)


class CityInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: TerrainType


class GridPoint(BaseModel):
    """单个 milepost。"""

    model_config = ConfigDict(frozen=True)

    id: str
    row: int
    col: int
    x: float = 0
    y: float = 0
    terrain: TerrainType = TerrainType.CLEAR
    city: Optional[CityInfo] = None

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    def to_point(self) -> Point:
        return Point(row=self.row, col=self.col, x=self.x, y=self.y)


class MajorCityGroup(BaseModel):
    """主要城市：中心点 + 外围点，进入任意一点即视为连通整座城市。"""

    model_config = ConfigDict(frozen=True)

    city_name: str
    center: Point
    outposts: Tuple[Point, ...] = ()

    @property
    def mileposts(self) -> Tuple[Point, ...]:
        return (self.center,) + self.outposts

    @property
    def coords(self) -> Tuple[Coord, ...]:
        return tuple(p.coord for p in self.mileposts)


class FerryEdge(BaseModel):
    """渡轮连接：两个 ferry port 之间的隐式边。"""

    model_config = ConfigDict(frozen=True)

    name: str
    point_a: Point
    point_b: Point
    cost: int = 0


class BoardCatalog(BaseModel):
    """完整地图拓扑（进程级、不可变）。

    查询索引在构造后一次性建立，以只读映射保存在私有属性中。
    """

    model_config = ConfigDict(frozen=True)

    points: Tuple[GridPoint, ...] = ()
    major_cities: Tuple[MajorCityGroup, ...] = ()
    ferries: Tuple[FerryEdge, ...] = ()

    _by_coord: Mapping[Coord, GridPoint] = PrivateAttr(default_factory=dict)
    _city_points: Mapping[str, Tuple[GridPoint, ...]] = PrivateAttr(default_factory=dict)
    _ferry_by_coord: Mapping[Coord, FerryEdge] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        by_coord: Dict[Coord, GridPoint] = {}
        city_points: Dict[str, List[GridPoint]] = {}
        for point in self.points:
            by_coord[point.coord] = point
            if point.city is not None:
                city_points.setdefault(point.city.name, []).append(point)
        ferry_by_coord: Dict[Coord, FerryEdge] = {}
        for ferry in self.ferries:
            ferry_by_coord[ferry.point_a.coord] = ferry
            ferry_by_coord[ferry.point_b.coord] = ferry
        self._by_coord = MappingProxyType(by_coord)
        self._city_points = MappingProxyType({name: tuple(pts) for name, pts in city_points.items()})
        self._ferry_by_coord = MappingProxyType(ferry_by_coord)

    def __deepcopy__(self, memo=None) -> "BoardCatalog":
        # 不可变，共享同一份即可（MappingProxyType 不支持深拷贝）
        return self

    def point_at(self, row: int, col: int) -> Optional[GridPoint]:
        return self._by_coord.get((row, col))

    def city_names(self) -> List[str]:
        """所有命名城市（按地图顺序，去重）。"""
        return list(self._city_points.keys())

    def city_mileposts(self, city_name: str) -> List[GridPoint]:
        return list(self._city_points.get(city_name, []))

    def city_at(self, row: int, col: int) -> Optional[str]:
        point = self._by_coord.get((row, col))
        if point is None or point.city is None:
            return None
        return point.city.name

    def ferry_at(self, row: int, col: int) -> Optional[FerryEdge]:
        return self._ferry_by_coord.get((row, col))

    def major_city(self, city_name: str) -> Optional[MajorCityGroup]:
        for group in self.major_cities:
            if group.city_name == city_name:
                return group
        return None
