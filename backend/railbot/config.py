"""
配置管理模块
"""
import logging
import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# 加载环境变量
load_dotenv()


class Settings(BaseModel):
    """应用配置"""

    # 日志配置
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = os.getenv("RAILBOT_LOG_LEVEL", "INFO").upper()

    # 地图数据（mileposts + ferries JSON）
    board_data_path: Optional[str] = os.getenv("RAILBOT_BOARD_DATA_PATH") or None

    # 胜利条件：现金门槛（M ECU）
    victory_threshold: int = int(os.getenv("RAILBOT_VICTORY_THRESHOLD", "250"))

    # 审计写入开关（关闭后 take_turn 仍然构建审计，只是不落库）
    audit_persistence_enabled: bool = os.getenv("RAILBOT_AUDIT_PERSISTENCE", "true").lower() != "false"

    # API 配置
    api_prefix: str = "/api"
    cors_origins: list = ["*"]

    model_config = ConfigDict(case_sensitive=False)


# 全局配置实例
settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """按配置初始化根 logger（进程启动时调用一次）。"""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def validate_config() -> bool:
    """
    验证配置是否完整

    Returns:
        bool: 配置是否有效
    """
    if not settings.board_data_path:
        logging.getLogger(__name__).warning("未设置 RAILBOT_BOARD_DATA_PATH，使用内置地图")
        return False

    if not os.path.exists(settings.board_data_path):
        logging.getLogger(__name__).warning("地图文件不存在: %s", settings.board_data_path)
        return False

    return True
