"""
hotel_ops/domain/date_range.py

日期区间工具

所有日期都是日历日（YYYY-MM-DD），不是时间戳。
区间有两种形态：
- 统计窗口：[start, end] 两端都包含
- 住宿区间：[check_in, check_out) 离店日不计晚数
内部统一换算为半开区间做重叠和截取运算。
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterator, Optional, Union

from hotel_ops.errors import ValidationError

DateLike = Union[date, datetime, str]

ONE_DAY = timedelta(days=1)


def parse_date(value: DateLike, field: str = "date") -> date:
    """
    解析日历日

    Args:
        value: date / datetime / "YYYY-MM-DD" 字符串（可带时间部分），datetime 截断为日期
        field: 字段名，用于错误信息

    Raises:
        ValidationError: 无法解析
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # 只允许日期后跟 "T" 或空格开头的时间部分
        if len(value) > 10 and value[10] not in ("T", " "):
            raise ValidationError(f"{field} 不是合法日期: {value!r}", {"field": field})
        try:
            return date.fromisoformat(value[:10])
        except ValueError as e:
            raise ValidationError(
                f"{field} 不是合法日期: {value!r}", {"field": field}
            ) from e
    raise ValidationError(f"{field} 缺失或类型错误: {value!r}", {"field": field})


def week_start(d: date) -> date:
    """ISO 周的周一"""
    return d - timedelta(days=d.weekday())


def month_start(d: date) -> date:
    """当月第一天"""
    return d.replace(day=1)


@dataclass(frozen=True)
class DateRange:
    """
    日历日区间

    Attributes:
        start: 起始日（包含）
        end: 结束日
        end_inclusive: True 表示 end 当天也在区间内
    """

    start: date
    end: date
    end_inclusive: bool = True

    def __post_init__(self):
        if self.end < self.start:
            raise ValidationError(
                f"结束日期 {self.end} 早于开始日期 {self.start}",
                {"start": str(self.start), "end": str(self.end)},
            )

    @classmethod
    def window(cls, start: DateLike, end: DateLike) -> "DateRange":
        """统计窗口，两端包含"""
        return cls(parse_date(start, "window_start"), parse_date(end, "window_end"), True)

    @classmethod
    def stay(cls, check_in: DateLike, check_out: DateLike) -> "DateRange":
        """住宿区间，离店日不包含"""
        return cls(parse_date(check_in, "check_in_date"), parse_date(check_out, "check_out_date"), False)

    @property
    def stop(self) -> date:
        """半开形式下的结束边界"""
        return self.end + ONE_DAY if self.end_inclusive else self.end

    @property
    def days(self) -> int:
        """区间覆盖的日历日数；住宿区间即晚数"""
        return (self.stop - self.start).days

    def contains(self, d: date) -> bool:
        return self.start <= d < self.stop

    def overlaps(self, other: "DateRange") -> bool:
        return self.start < other.stop and other.start < self.stop

    def overlap_days(self, other: "DateRange") -> int:
        return max(0, (min(self.stop, other.stop) - max(self.start, other.start)).days)

    def clamp(self, other: "DateRange") -> Optional["DateRange"]:
        """截取到 other 之内，无交集时返回 None（结果为半开区间）"""
        if not self.overlaps(other):
            return None
        return DateRange(max(self.start, other.start), min(self.stop, other.stop), False)

    def iter_days(self) -> Iterator[date]:
        current = self.start
        while current < self.stop:
            yield current
            current += ONE_DAY

    def __str__(self) -> str:
        closing = "]" if self.end_inclusive else ")"
        return f"[{self.start.isoformat()}, {self.end.isoformat()}{closing}"


def field_of(record: Any, *names: str, default: Any = None) -> Any:
    """
    从 ORM 对象、pydantic 模型或文档字典中读取字段

    文档存储中的记录可能是 camelCase，按顺序尝试多个字段名。
    """
    for name in names:
        if isinstance(record, dict):
            if name in record:
                return record[name]
        elif hasattr(record, name):
            return getattr(record, name)
    return default
