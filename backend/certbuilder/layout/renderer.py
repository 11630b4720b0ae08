"""
元素绘制器 - 将单个元素以绝对坐标放到页面上

职责：
1. 像素坐标经单位换算后放置（左上角原点，不参与流式排版）
2. 文本：字体族/字号/text-transform；居中元素先测字宽再左移半宽
3. 图片：限制最大宽度(50mm)，等比缩放，不裁切
4. 课程条目：粗体标签 + 常规取值，逐行下移

测试要点：
- test_text_anchor_converted: 坐标换算
- test_centered_name_shift: 居中元素按粗体字宽左移
- test_image_capped_width: 图片限宽等比缩放
"""

from __future__ import annotations

from ..config import RuntimeConfig, get_config
from ..interfaces import IElementRenderer
from ..models import CourseEntry, ImageAsset, Page, PlacedImage, PlacedText, Position, TextStyle
from .fonts import FontResolver
from .units import UnitConverter


class ElementRenderer(IElementRenderer):
    """元素绘制器实现"""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        converter: UnitConverter | None = None,
        fonts: FontResolver | None = None,
    ):
        self.config = config or get_config()
        self.converter = converter or UnitConverter(
            self.config.units.dpi, self.config.units.mm_per_inch
        )
        self.fonts = fonts or FontResolver(self.config)
        self.max_image_width = self.config.elements.max_image_width_mm

    def render_text(
        self,
        page: Page,
        content: str,
        position: Position,
        style: TextStyle,
        element: str = "",
        centered: bool = False,
    ) -> PlacedText:
        """绘制文本元素"""
        x, y = self.converter.point(position.x, position.y)
        text = style.text_transform.apply(content)

        draw_x: float = x
        if centered:
            draw_x = x - self.fonts.text_width(text, style) / 2

        placed = PlacedText(element=element, text=text, x=draw_x, y=y, style=style, anchor_x=x)
        page.elements.append(placed)
        return placed

    def render_image(
        self,
        page: Page,
        image: ImageAsset,
        position: Position,
        element: str = "",
    ) -> PlacedImage:
        """绘制图片元素（超宽时等比缩小）"""
        x, y = self.converter.point(position.x, position.y)
        ratio = self.converter.px_to_mm_ratio
        width = image.width * ratio
        height = image.height * ratio

        if width > self.max_image_width:
            scale = self.max_image_width / width
            width = self.max_image_width
            height = height * scale

        placed = PlacedImage(element=element, image=image, x=x, y=y, width=width, height=height)
        page.elements.append(placed)
        return placed

    def render_entry(
        self,
        page: Page,
        entry: CourseEntry,
        x: int,
        y: int,
        style: TextStyle,
        element: str = "course_list",
    ) -> None:
        """绘制课程条目（x/y已是mm）"""
        cfg = self.config.course_list
        rows = [
            (cfg.title_label, entry.title),
            (cfg.completion_date_label, entry.completion_date),
            (cfg.instructor_field_label, entry.instructor),
        ]
        label_style = style.with_bold(True)
        value_style = style.with_bold(False)
        gap = self.fonts.text_width(" ", value_style)

        top = y
        for label, value in rows:
            label_text = style.text_transform.apply(label)
            page.elements.append(
                PlacedText(element=element, text=label_text, x=x, y=top, style=label_style)
            )
            value_x = x + self.fonts.text_width(label_text, label_style) + gap
            page.elements.append(
                PlacedText(
                    element=element,
                    text=style.text_transform.apply(value),
                    x=value_x,
                    y=top,
                    style=value_style,
                )
            )
            top += entry.line_height + entry.field_margin

    @staticmethod
    def background_box(
        image: ImageAsset, page_width: float, page_height: float
    ) -> tuple[float, float, float, float]:
        """
        背景图contain缩放，水平居中、顶端对齐

        Returns:
            (x, y, width, height)，单位mm
        """
        scale = min(page_width / image.width, page_height / image.height)
        width = image.width * scale
        height = image.height * scale
        return (page_width - width) / 2, 0.0, width, height
