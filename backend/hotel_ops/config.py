"""
应用配置
从环境变量读取配置
"""
from decimal import Decimal
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用设置"""

    # 应用基础配置
    APP_NAME: str = "Hotel Ops Analytics"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 数据库配置
    DATABASE_URL: str = "sqlite:///./hotel_ops.db"

    # 仪表盘缓存配置
    METRICS_CACHE_ENABLED: bool = True
    METRICS_CACHE_LOCK_TIMEOUT: float = 2.0      # 获取协调锁的最长等待(秒)
    METRICS_INFLIGHT_WAIT_TIMEOUT: float = 30.0  # 等待进行中计算的最长时间(秒)

    # 报价
    DEFAULT_TAX_RATE: Decimal = Decimal("0")

    model_config = ConfigDict(env_file=".env", case_sensitive=True)


# 全局设置实例
settings = Settings()
