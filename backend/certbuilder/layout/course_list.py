"""
课程列表格式化 - 课程ID展开为带高度的条目

条目高度(mm)在分页前一次算好：
    course_margin + 3 * field_margin + 3 * round(font_size * line_height * px_to_mm)

course_margin(100px)与field_margin(10px)各自换算取整。

测试要点：
- test_entry_height: 高度公式
- test_empty_course_ids: 空列表
- test_missing_title: 标题缺失时为空串
"""

from __future__ import annotations

from ..config import RuntimeConfig, get_config
from ..interfaces import ICourseDataProvider, ICourseListFormatter
from ..models import CourseEntry, CourseRecord, TextStyle
from .units import UnitConverter, round_half_away

FIELD_COUNT = 3


class CourseListFormatter(ICourseListFormatter):
    """课程列表格式化实现"""

    def __init__(
        self,
        data_provider: ICourseDataProvider,
        config: RuntimeConfig | None = None,
        converter: UnitConverter | None = None,
        instructor: str | None = None,
    ):
        self.config = config or get_config()
        self.data = data_provider
        self.converter = converter or UnitConverter(
            self.config.units.dpi, self.config.units.mm_per_inch
        )
        cfg = self.config.course_list
        self.instructor = instructor if instructor is not None else cfg.instructor_label
        self.course_margin = self.converter.px_to_unit(cfg.course_margin_px)
        self.field_margin = self.converter.px_to_unit(cfg.field_margin_px)

    def format(
        self,
        user_id: int,
        course_ids: list[int],
        style: TextStyle,
    ) -> list[CourseEntry]:
        """按传入顺序展开（不去重不排序）"""
        line_height = self.line_height(style.font_size)
        height = self.entry_height(style.font_size)

        entries = []
        for record in self.records(user_id, course_ids):
            entries.append(CourseEntry(
                course_id=record.course_id,
                title=record.title,
                completion_date=record.completion_date,
                instructor=self.instructor,
                height=height,
                line_height=line_height,
                field_margin=self.field_margin,
            ))
        return entries

    def records(self, user_id: int, course_ids: list[int]) -> list[CourseRecord]:
        """向数据协作方逐个取课程数据"""
        return [
            CourseRecord(
                course_id=course_id,
                title=self.data.get_course_title(course_id) or "",
                completion_date=self.data.get_course_completion_date(user_id, course_id) or "",
            )
            for course_id in course_ids
        ]

    def line_height(self, font_size: int) -> int:
        """单行高度(mm)"""
        factor = self.config.typography.line_height_factor
        return round_half_away(font_size * factor * self.converter.px_to_mm_ratio)

    def entry_height(self, font_size: int) -> int:
        """条目高度(mm)"""
        return (
            self.course_margin
            + FIELD_COUNT * self.field_margin
            + FIELD_COUNT * self.line_height(font_size)
        )
