"""FastAPI应用主文件.

Review note:
- 使用记录保留窗口清理在启动时执行一次，之后作为后台任务周期执行，关闭时取消。
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager, suppress
import asyncio
import logging
import os

from app.config import settings
from app.database import init_db, async_session_maker
from app.exceptions import ToolLocationError
from app.services.tools.retention import run_retention_loop

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时执行
    logger.info("启动文化遗产工具平台后端...")

    # 确保必要的目录存在
    os.makedirs("data", exist_ok=True)

    # 初始化数据库
    await init_db()
    logger.info("数据库初始化完成")

    retention_task = asyncio.create_task(run_retention_loop(async_session_maker))
    logger.info("使用记录保留窗口: %s 天", settings.USAGE_RETENTION_DAYS)

    yield

    # 关闭时执行
    retention_task.cancel()
    with suppress(asyncio.CancelledError):
        await retention_task
    logger.info("关闭文化遗产工具平台后端...")


# 创建FastAPI应用
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="文化遗产学习工具目录、使用统计与评价API",
    lifespan=lifespan,
)

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ToolLocationError)
async def tool_location_error_handler(request: Request, exc: ToolLocationError):
    """工具缺少内部路径和外部链接"""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": "欢迎使用文化遗产工具平台API",
        "version": settings.APP_VERSION,
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """健康检查"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


# 导入并注册路由
from app.api.v1 import tools, usage, reviews, users
app.include_router(tools.router, prefix="/api/v1", tags=["tools"])
app.include_router(usage.router, prefix="/api/v1", tags=["usage"])
app.include_router(reviews.router, prefix="/api/v1", tags=["reviews"])
app.include_router(users.router, prefix="/api/v1", tags=["users"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
