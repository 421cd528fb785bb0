"""
领域异常

只有真正的异常情况才抛出；校验失败、执行失败都以数据形式返回。
"""


class RailbotError(RuntimeError):
    """railbot 异常基类。"""


class NotFoundError(RailbotError):
    """游戏 / 玩家记录不存在。"""


class BoardDataError(RailbotError):
    """地图数据文件格式错误。"""


class GameRuleError(RailbotError):
    """协作方拒绝执行某个动作（移动力不足、资金不足等）。"""
