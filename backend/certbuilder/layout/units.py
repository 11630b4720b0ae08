"""
单位换算 - 像素 <-> 毫米

固定参考密度 96 DPI，25.4 mm/inch：
    mm = round(px * 25.4 / 96)

每个值单独取整（不对和取整），保证预览与生成结果坐标一致。
"""

from __future__ import annotations

import math

MM_PER_INCH = 25.4
REFERENCE_DPI = 96
PT_PER_INCH = 72


def round_half_away(value: float) -> int:
    """四舍五入（.5远离0）"""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def px_to_mm(px: float, dpi: int = REFERENCE_DPI, mm_per_inch: float = MM_PER_INCH) -> int:
    """像素转毫米（取整）"""
    return round_half_away(px * mm_per_inch / dpi)


def pt_to_mm(pt: float) -> float:
    """磅转毫米（不取整，用于字宽测量）"""
    return pt * MM_PER_INCH / PT_PER_INCH


def mm_to_pt(value_mm: float) -> float:
    """毫米转磅（PDF用户空间单位）"""
    return value_mm * PT_PER_INCH / MM_PER_INCH


class UnitConverter:
    """按配置密度换算"""

    def __init__(self, dpi: int = REFERENCE_DPI, mm_per_inch: float = MM_PER_INCH):
        self.dpi = dpi
        self.mm_per_inch = mm_per_inch

    @property
    def px_to_mm_ratio(self) -> float:
        return self.mm_per_inch / self.dpi

    def px_to_unit(self, px: float) -> int:
        return px_to_mm(px, self.dpi, self.mm_per_inch)

    def point(self, x: float, y: float) -> tuple[int, int]:
        """坐标对换算（各自取整）"""
        return self.px_to_unit(x), self.px_to_unit(y)
