"""
FastAPI 应用入口
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from railbot import __version__
from railbot.config import configure_logging, settings, validate_config
from railbot.dependencies import get_board
from railbot.routers import bot_audit_router

configure_logging()

# 创建 FastAPI 应用
app = FastAPI(
    title="Railbot API",
    description="铁路建设桌游 bot 回合决策审计接口",
    version=__version__,
)

# 配置 CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(bot_audit_router, prefix=settings.api_prefix, tags=["Bot Audit"])


@app.on_event("startup")
async def startup_event():
    """应用启动时的初始化"""
    print("=" * 60)
    print("Railbot 启动中...")
    print("=" * 60)

    if validate_config():
        print("✓ 配置验证通过")
    else:
        print("✗ 未配置外部地图文件，使用内置地图")

    board = get_board()
    print(f"✓ 地图已加载: {len(board.points)} mileposts, {len(board.major_cities)} 座主要城市")
    print(f"✓ API 文档: http://localhost:8000/docs")
    print("=" * 60)


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": "Railbot API",
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """健康检查"""
    return {"status": "healthy"}
