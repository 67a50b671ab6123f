"""
hotel_ops/services/metrics_cache.py

仪表盘统计缓存 - 按租户缓存，显式失效，单飞重算

特性：
- 没有 TTL，只在调用方发生变更后调用 invalidate / invalidate_all
- 同一租户同时只有一次重算，其余调用方等待进行中的结果
- 缓存中只存放完整的结果对象
- 计算期间发生失效时，本次结果不写回缓存
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar
import logging
import threading

from hotel_ops.errors import CacheCoordinationError

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class CacheStatistics:
    """
    缓存统计

    Attributes:
        hits: 命中次数
        misses: 未命中并触发计算的次数
        joins: 等待他人进行中计算的次数
        invalidations: 失效次数
    """

    hits: int = 0
    misses: int = 0
    joins: int = 0
    invalidations: int = 0


class _InFlight:
    """一次进行中的计算"""

    def __init__(self, generation: int):
        self.generation = generation
        self.done = threading.Event()
        self.result: Any = None
        self.error: Optional[BaseException] = None


class MetricsCache(Generic[V]):
    """
    租户级结果缓存

    Example:
        >>> cache = MetricsCache()
        >>> cache.get_or_compute(1, lambda: compute_metrics(1))
        >>> cache.invalidate(1)

    Thread Safety:
        所有公共方法都是线程安全的。
    """

    def __init__(self, lock_timeout: float = 2.0, wait_timeout: float = 30.0):
        """
        Args:
            lock_timeout: 获取协调锁的最长等待秒数
            wait_timeout: 等待进行中计算的最长秒数
        """
        self._entries: Dict[Hashable, V] = {}
        self._inflight: Dict[Hashable, _InFlight] = {}
        self._generations: Dict[Hashable, int] = {}
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout
        self._wait_timeout = wait_timeout
        self._stats = CacheStatistics()

    def _acquire(self) -> None:
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise CacheCoordinationError(
                f"Could not acquire cache lock within {self._lock_timeout}s"
            )

    def get(self, key: Hashable) -> Optional[V]:
        """读取缓存，未命中返回 None"""
        self._acquire()
        try:
            return self._entries.get(key)
        finally:
            self._lock.release()

    def put(self, key: Hashable, value: V) -> None:
        self._acquire()
        try:
            self._entries[key] = value
        finally:
            self._lock.release()

    def invalidate(self, key: Hashable) -> None:
        """
        使单个租户失效，进行中的计算结果不再写回

        Raises:
            CacheCoordinationError: 拿不到协调锁（条目未被清除）
        """
        self._acquire()
        try:
            self._entries.pop(key, None)
            self._inflight.pop(key, None)
            self._generations[key] = self._generations.get(key, 0) + 1
            self._stats.invalidations += 1
        finally:
            self._lock.release()
        logger.info(f"Metrics cache invalidated for tenant {key}")

    def invalidate_all(self) -> None:
        self._acquire()
        try:
            for key in set(self._entries) | set(self._inflight):
                self._generations[key] = self._generations.get(key, 0) + 1
            self._entries.clear()
            self._inflight.clear()
            self._stats.invalidations += 1
        finally:
            self._lock.release()
        logger.info("Metrics cache invalidated for all tenants")

    def get_or_compute(self, key: Hashable, compute: Callable[[], V]) -> V:
        """
        读取缓存，未命中时计算并写回

        同一 key 的并发调用只会执行一次 compute，其余调用方拿到同一个结果
        （compute 抛出的异常也会传给所有等待者，且不写缓存）。

        Raises:
            CacheCoordinationError: 拿不到协调锁或等待超时
        """
        self._acquire()
        try:
            if key in self._entries:
                self._stats.hits += 1
                logger.debug(f"Metrics cache hit for tenant {key}")
                return self._entries[key]

            flight = self._inflight.get(key)
            if flight is not None and flight.done.is_set():
                # 上次结束时没拿到锁，遗留的记录不再可加入
                flight = None
            owner = flight is None
            if owner:
                flight = _InFlight(self._generations.get(key, 0))
                self._inflight[key] = flight
                self._stats.misses += 1
            else:
                self._stats.joins += 1
        finally:
            self._lock.release()

        if not owner:
            logger.debug(f"Joining in-flight metrics computation for tenant {key}")
            if not flight.done.wait(self._wait_timeout):
                raise CacheCoordinationError(
                    f"In-flight computation for tenant {key} did not finish within {self._wait_timeout}s"
                )
            if flight.error is not None:
                raise flight.error
            return flight.result

        logger.info(f"Metrics cache miss for tenant {key}, recomputing")
        try:
            flight.result = compute()
        except BaseException as e:
            flight.error = e
            raise
        finally:
            self._finish(key, flight)
        return flight.result

    def _finish(self, key: Hashable, flight: _InFlight) -> None:
        """写回结果并结束进行中的计算；拿不到锁时只结束，不写回"""
        if self._lock.acquire(timeout=self._lock_timeout):
            try:
                if flight.error is None and self._generations.get(key, 0) == flight.generation:
                    self._entries[key] = flight.result
                if self._inflight.get(key) is flight:
                    del self._inflight[key]
            finally:
                self._lock.release()
        else:
            logger.warning(
                f"Could not acquire cache lock within {self._lock_timeout}s to store metrics "
                f"for tenant {key}, result not cached"
            )
        flight.done.set()

    def get_stats(self) -> Dict[str, int]:
        """
        获取缓存统计

        Raises:
            CacheCoordinationError: 拿不到协调锁
        """
        self._acquire()
        try:
            return {
                "entries": len(self._entries),
                "in_flight": len(self._inflight),
                "hits": self._stats.hits,
                "misses": self._stats.misses,
                "joins": self._stats.joins,
                "invalidations": self._stats.invalidations,
            }
        finally:
            self._lock.release()
