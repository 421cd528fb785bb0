"""
FastAPI dependencies.
"""
from functools import lru_cache

from railbot.models.board import BoardCatalog
from railbot.services.board_loader import get_board_catalog
from railbot.services.memory_gateway import InMemoryGameGateway


@lru_cache()
def get_board() -> BoardCatalog:
    return get_board_catalog()


@lru_cache()
def get_gateway() -> InMemoryGameGateway:
    return InMemoryGameGateway()
