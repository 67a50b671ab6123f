"""
hotel_ops/errors.py

错误分类

- ValidationError: 定价输入非法（入住晚数 <= 0、缺少基础价格等），同步抛给调用方，不自动重试
- MetricsUnavailableError: 外部存储读取失败，调用方应展示重试入口而不是归零的仪表盘
- StoreReadError: 存储适配器内部的读取失败
- HotelNotFoundError: hotel_id 不存在，不返回归零的统计
- CacheCoordinationError: 缓存协调失败，门面捕获后降级为直接计算
"""
from typing import Any, Dict, Optional


class HotelOpsError(Exception):
    """引擎错误基类"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "context": self.context,
        }


class ValidationError(HotelOpsError):
    """输入校验失败"""


class MetricsUnavailableError(HotelOpsError):
    """无法从外部存储读取统计所需数据"""


class StoreReadError(HotelOpsError):
    """存储适配器读取失败"""


class CacheCoordinationError(HotelOpsError):
    """无法获取缓存的单飞协调锁"""


class HotelNotFoundError(HotelOpsError):
    """租户不存在"""
