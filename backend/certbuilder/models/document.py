"""
文档模型 - 页面与绝对定位元素

坐标约定：单位mm，原点在页面左上角。
页面尺寸在一次生成中固定不变。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

from .position import Position, TextStyle


class ImageAsset(BaseModel):
    """图片资源（背景/签名）"""

    ref: Any = None
    source: Union[Path, bytes]
    width: int = Field(..., gt=0, description="像素宽")
    height: int = Field(..., gt=0, description="像素高")

    model_config = {"arbitrary_types_allowed": True}


class PlacedText(BaseModel):
    """已定位文本"""

    kind: Literal["text"] = "text"
    element: str
    text: str
    x: float
    y: float
    style: TextStyle

    # 居中前的锚点X(mm)
    anchor_x: float | None = None


class PlacedImage(BaseModel):
    """已定位图片"""

    kind: Literal["image"] = "image"
    element: str
    image: ImageAsset
    x: float
    y: float
    width: float
    height: float


PlacedElement = Union[PlacedText, PlacedImage]


class FixedElement(BaseModel):
    """每页重绘的固定元素（姓名/签名/页码/自定义字段）"""

    name: str
    position: Position
    text: str | None = None
    image: ImageAsset | None = None
    style: TextStyle | None = None
    centered: bool = False

    @property
    def is_image(self) -> bool:
        return self.image is not None


class Page(BaseModel):
    """单页"""

    number: int
    elements: list[PlacedElement] = Field(default_factory=list)

    def find(self, element: str) -> list[PlacedElement]:
        """按元素名查找"""
        return [e for e in self.elements if e.element == element]

    @property
    def texts(self) -> list[PlacedText]:
        return [e for e in self.elements if isinstance(e, PlacedText)]

    @property
    def images(self) -> list[PlacedImage]:
        return [e for e in self.elements if isinstance(e, PlacedImage)]


class Document(BaseModel):
    """文档（页面序列+共享背景）"""

    width: int
    height: int
    background: ImageAsset | None = None
    pages: list[Page] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def current_page(self) -> Page:
        return self.pages[-1]

    def add_page(self) -> Page:
        """追加新页并返回"""
        page = Page(number=len(self.pages) + 1)
        self.pages.append(page)
        return page


class RenderContext(BaseModel):
    """分页状态（单次生成独占，生成后丢弃）"""

    start_x: int = 0
    start_y: int = 0
    cursor_y: int = 0
    page_height: int
    bottom_margin: int
    page_count: int = 0
    fixed: list[FixedElement] = Field(default_factory=list, description="每页重绘的固定元素")

    @property
    def usable_height(self) -> int:
        """可用高度 = 页高 - 底边距"""
        return self.page_height - self.bottom_margin

    def fits(self, height: int) -> bool:
        """条目放在当前游标处是否不越过底边距"""
        return self.cursor_y + height <= self.usable_height

    def new_page(self) -> None:
        self.page_count += 1
        self.cursor_y = self.start_y

    def advance(self, height: int) -> None:
        self.cursor_y += height
