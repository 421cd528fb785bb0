"""
railbot：铁路建设桌游的 bot 回合决策流水线
"""
__version__ = "0.1.0"
