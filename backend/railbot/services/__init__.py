"""
协作方接口与实现
"""
from .gateway import GameGateway, StoreTransaction
from .memory_gateway import InMemoryGameGateway
from .board_loader import board_from_records, get_board_catalog, load_board_catalog

__all__ = [
    "GameGateway",
    "StoreTransaction",
    "InMemoryGameGateway",
    "board_from_records",
    "get_board_catalog",
    "load_board_catalog",
]
