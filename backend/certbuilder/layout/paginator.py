"""
分页引擎 - 课程条目逐条下排，放不下时换页并重绘固定元素

状态机：
1. 初始：创建第1页，游标=start_y，绘制固定元素
2. 每个条目：cursor + height > page_height - bottom_margin 时换页，
   重绘固定元素，游标回到start_y；否则留在当前页
3. 在(start_x, cursor)绘制条目，cursor += height
4. 最后一个条目之后不再换页

条目整体放置，不跨页拆分；超过整页可用高度的条目换到新页后照常放置（视觉溢出，不报错）。

测试要点：
- test_two_entries_per_page: 条目60mm/起点20mm/页高210mm/底边距40mm -> 每页2条
- test_fixed_elements_repeated: 每页重绘固定元素
- test_oversized_entry: 超高条目换到新页且不报错
- test_order_preserved: 条目顺序不变
"""

from __future__ import annotations

import logging

from ..config import RuntimeConfig, get_config
from ..interfaces import IPaginationEngine
from ..models import (
    CourseEntry,
    Document,
    FixedElement,
    Page,
    Position,
    RenderContext,
    TextStyle,
)
from .renderer import ElementRenderer

logger = logging.getLogger(__name__)

PAGE_NUMBER = "page_number"


class PaginationEngine(IPaginationEngine):
    """分页引擎实现"""

    def __init__(
        self,
        renderer: ElementRenderer | None = None,
        config: RuntimeConfig | None = None,
        bottom_margin: int | None = None,
    ):
        self.config = config or get_config()
        self.renderer = renderer or ElementRenderer(self.config)
        self.bottom_margin = (
            bottom_margin if bottom_margin is not None else self.config.page.bottom_margin_mm
        )

    def plan(
        self,
        heights: list[int],
        start_y: int,
        page_height: int,
    ) -> list[list[int]]:
        """
        计算每页放置的条目下标

        Args:
            heights: 条目高度(mm)，按顺序
            start_y: 起始游标(mm)
            page_height: 页高(mm)

        Returns:
            每页的条目下标列表（至少1页）
        """
        ctx = RenderContext(
            start_y=start_y,
            cursor_y=start_y,
            page_height=page_height,
            bottom_margin=self.bottom_margin,
            page_count=1,
        )
        pages: list[list[int]] = [[]]
        for index, height in enumerate(heights):
            if not ctx.fits(height):
                ctx.new_page()
                pages.append([])
            pages[-1].append(index)
            ctx.advance(height)
        return pages

    def paginate(
        self,
        document: Document,
        entries: list[CourseEntry],
        anchor: Position | None,
        fixed: list[FixedElement],
        style: TextStyle,
    ) -> RenderContext:
        """
        在文档上绘制全部页面

        Args:
            document: 空文档（页尺寸已确定）
            entries: 课程条目
            anchor: course_list 锚点(px)，为None时不绘制课程列表
            fixed: 固定元素
            style: 课程列表样式

        Returns:
            最终分页状态
        """
        start_x, start_y = (
            self.renderer.converter.point(anchor.x, anchor.y) if anchor else (0, 0)
        )
        ctx = RenderContext(
            start_x=start_x,
            start_y=start_y,
            cursor_y=start_y,
            page_height=document.height,
            bottom_margin=self.bottom_margin,
            fixed=list(fixed),
        )

        if anchor is None:
            entries = []
        layout = self.plan([e.height for e in entries], start_y, document.height)
        total = len(layout)

        for page_indexes in layout:
            ctx.new_page()
            page = document.add_page()
            if ctx.page_count > 1:
                logger.info(f"换页: 第{ctx.page_count}/{total}页")
            self.paint_fixed(page, ctx.fixed, ctx.page_count, total)

            for index in page_indexes:
                entry = entries[index]
                if entry.height > ctx.usable_height - ctx.start_y:
                    logger.warning(f"条目高度超出单页可用高度: {entry.title} ({entry.height}mm)")
                self.renderer.render_entry(page, entry, ctx.start_x, ctx.cursor_y, style)
                ctx.advance(entry.height)

        return ctx

    def paint_fixed(self, page: Page, fixed: list[FixedElement], page_no: int, total: int) -> None:
        """在当前页绘制固定元素"""
        for item in fixed:
            if item.is_image:
                self.renderer.render_image(page, item.image, item.position, element=item.name)
                continue

            text = item.text or ""
            if item.name == PAGE_NUMBER:
                text = text.format(page=page_no, total=total)
            self.renderer.render_text(
                page,
                text,
                item.position,
                item.style or TextStyle(),
                element=item.name,
                centered=item.centered,
            )
