"""
价格服务 - 房型分层定价解析

单日价格优先级：
1. 季节价格：按声明顺序扫描，最后一个覆盖该日的区间生效（区间允许重叠）
2. 星期价格：该日星期名在 weekday_pricing 中
3. 基础价格

税费不在这里计算，调用方用 apply_tax 叠加。
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Tuple
import logging

from hotel_ops.domain.date_range import DateRange, DateLike, field_of, parse_date
from hotel_ops.errors import ValidationError
from hotel_ops.models.schemas import NightlyPrice, PriceCalendarEntry, StayQuote

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
)


class PricingTier(str, Enum):
    """价格来源层级"""
    SEASONAL = "seasonal"
    WEEKDAY = "weekday"
    BASE = "base"


def to_money(value: Any, field: str) -> Decimal:
    """把 int/float/str/Decimal 转为 Decimal"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} 不是合法金额: {value!r}", {"field": field})
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"{field} 不是合法金额: {value!r}", {"field": field}) from e


@dataclass(frozen=True)
class SeasonalRange:
    start_date: date
    end_date: date
    price: Decimal

    def covers(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date


@dataclass(frozen=True)
class PricingTiers:
    """校验后的房型定价数据"""

    base_price: Decimal
    weekday_pricing: Dict[str, Decimal]
    seasonal_pricing: Tuple[SeasonalRange, ...]

    def price_for(self, d: date) -> Tuple[Decimal, PricingTier]:
        for season in reversed(self.seasonal_pricing):
            if season.covers(d):
                return season.price, PricingTier.SEASONAL

        weekday = WEEKDAY_NAMES[d.weekday()]
        if weekday in self.weekday_pricing:
            return self.weekday_pricing[weekday], PricingTier.WEEKDAY

        return self.base_price, PricingTier.BASE


def load_pricing_tiers(room_type: Any) -> PricingTiers:
    """
    从房型记录读取并校验定价数据

    Args:
        room_type: ORM RoomType、pydantic 模型或文档字典（snake_case / camelCase 均可）

    Raises:
        ValidationError: 缺少基础价格、基础价格非正、覆盖价格为负、季节区间倒置
    """
    raw_base = field_of(room_type, "base_price", "basePrice")
    if raw_base is None:
        raise ValidationError("房型缺少基础价格", {"field": "base_price"})
    base_price = to_money(raw_base, "base_price")
    if base_price <= 0:
        raise ValidationError(
            f"基础价格必须大于 0: {base_price}", {"field": "base_price"}
        )

    weekday_pricing: Dict[str, Decimal] = {}
    for day, price in (field_of(room_type, "weekday_pricing", "weekdayPricing") or {}).items():
        if price is None:
            continue
        name = str(day).lower()
        if name not in WEEKDAY_NAMES:
            raise ValidationError(f"未知的星期名: {day!r}", {"field": "weekday_pricing"})
        amount = to_money(price, f"weekday_pricing.{name}")
        if amount < 0:
            raise ValidationError(
                f"星期价格不能为负: {name}={amount}", {"field": "weekday_pricing"}
            )
        weekday_pricing[name] = amount

    seasons: List[SeasonalRange] = []
    for index, entry in enumerate(field_of(room_type, "seasonal_pricing", "seasonalPricing") or []):
        start = parse_date(field_of(entry, "start_date", "startDate"), f"seasonal_pricing[{index}].start_date")
        end = parse_date(field_of(entry, "end_date", "endDate"), f"seasonal_pricing[{index}].end_date")
        if end < start:
            raise ValidationError(
                f"季节价格区间结束日期早于开始日期: {start} ~ {end}",
                {"field": f"seasonal_pricing[{index}]"},
            )
        price = to_money(field_of(entry, "price"), f"seasonal_pricing[{index}].price")
        if price < 0:
            raise ValidationError(
                f"季节价格不能为负: {price}", {"field": f"seasonal_pricing[{index}]"}
            )
        seasons.append(SeasonalRange(start, end, price))

    return PricingTiers(base_price, weekday_pricing, tuple(seasons))


def apply_tax(subtotal: Decimal, tax_rate: Any) -> Tuple[Decimal, Decimal]:
    """
    在小计上叠加税费

    Args:
        subtotal: 房费小计
        tax_rate: 百分比税率（10 表示 10%）

    Returns:
        (tax, total)
    """
    rate = to_money(tax_rate if tax_rate is not None else 0, "tax_rate")
    if rate < 0:
        raise ValidationError(f"税率不能为负: {rate}", {"field": "tax_rate"})
    tax = subtotal * rate / Decimal("100")
    return tax, subtotal + tax


class PriceService:
    """价格服务"""

    def resolve_nightly_price(self, room_type: Any, target_date: DateLike) -> Decimal:
        """获取指定日期的房型价格"""
        tiers = load_pricing_tiers(room_type)
        price, _ = tiers.price_for(parse_date(target_date, "date"))
        return price

    def resolve_stay_total(self, room_type: Any, check_in_date: DateLike,
                           check_out_date: DateLike) -> StayQuote:
        """
        计算住宿房费小计

        逐晚累加 [check_in_date, check_out_date) 内每一天的价格，循环内不做舍入。

        Raises:
            ValidationError: 离店日期不晚于入住日期，或房型定价数据非法
        """
        check_in = parse_date(check_in_date, "check_in_date")
        check_out = parse_date(check_out_date, "check_out_date")
        if check_out <= check_in:
            raise ValidationError(
                "离店日期必须晚于入住日期",
                {"check_in_date": check_in.isoformat(), "check_out_date": check_out.isoformat()},
            )

        tiers = load_pricing_tiers(room_type)
        overlaps = _overlapping_pairs(tiers.seasonal_pricing)
        if overlaps:
            logger.warning(
                f"Room type {field_of(room_type, 'id', default='?')} has overlapping "
                f"seasonal ranges {overlaps}; later entries win"
            )

        breakdown = []
        subtotal = Decimal("0")
        for night in DateRange.stay(check_in, check_out).iter_days():
            price, _ = tiers.price_for(night)
            breakdown.append(NightlyPrice(date=night, price=price))
            subtotal += price

        return StayQuote(nights=len(breakdown), breakdown=breakdown, subtotal=subtotal)

    def get_price_calendar(self, room_type: Any, start_date: DateLike,
                           end_date: DateLike) -> List[PriceCalendarEntry]:
        """获取价格日历（两端包含）"""
        tiers = load_pricing_tiers(room_type)
        result = []
        for day in DateRange.window(start_date, end_date).iter_days():
            price, tier = tiers.price_for(day)
            result.append(PriceCalendarEntry(
                date=day,
                price=price,
                is_weekend=day.weekday() in (4, 5),  # 周五、周六
                tier=tier.value,
            ))
        return result

    def find_overlapping_seasons(self, room_type: Any) -> List[Tuple[int, int]]:
        """返回互相重叠的季节区间下标对"""
        return _overlapping_pairs(load_pricing_tiers(room_type).seasonal_pricing)


def _overlapping_pairs(seasons: Tuple[SeasonalRange, ...]) -> List[Tuple[int, int]]:
    pairs = []
    for i, first in enumerate(seasons):
        for j in range(i + 1, len(seasons)):
            second = seasons[j]
            if first.start_date <= second.end_date and second.start_date <= first.end_date:
                pairs.append((i, j))
    return pairs
