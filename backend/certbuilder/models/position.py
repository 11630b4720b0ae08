"""
元素坐标模型 - 坐标表中单个元素的位置与样式

对应坐标持久化格式：
    {background_id: {element_name: {x, y, font_size?, font_family?, text_transform?}}}
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TextTransform(str, Enum):
    """CSS text-transform 取值"""
    NONE = "none"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    CAPITALIZE = "capitalize"

    def apply(self, text: str) -> str:
        """按CSS语义变换文本"""
        if self is TextTransform.UPPERCASE:
            return text.upper()
        if self is TextTransform.LOWERCASE:
            return text.lower()
        if self is TextTransform.CAPITALIZE:
            # CSS capitalize只改每个词首字母，其余字符不动
            return " ".join(w[:1].upper() + w[1:] for w in text.split(" "))
        return text


class Position(BaseModel):
    """元素锚点（像素）与可选字体设置"""

    model_config = ConfigDict(extra="allow")

    x: int = Field(..., ge=0, description="左上角X(px)")
    y: int = Field(..., ge=0, description="左上角Y(px)")
    font_size: int | None = Field(None, gt=0, description="字号(pt)")
    font_family: str | None = Field(None, description="字体族")
    text_transform: TextTransform | None = Field(None, description="文本变换")

    @field_validator("x", "y", mode="before")
    @classmethod
    def _coerce_coordinate(cls, v: Any) -> Any:
        """数字字符串/浮点数取整，布尔值拒绝"""
        if isinstance(v, bool):
            raise ValueError("坐标不能为布尔值")
        try:
            if isinstance(v, str):
                v = float(v.strip())
            if isinstance(v, float):
                return int(round(v))
        except OverflowError as e:
            raise ValueError(f"坐标不是有限数值: {v}") from e
        return v

    @field_validator("text_transform", mode="before")
    @classmethod
    def _normalize_transform(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    def text_style(
        self,
        default_size: int,
        default_family: str,
        bold: bool = False,
    ) -> TextStyle:
        """按元素类别默认值解析出完整文本样式"""
        return TextStyle(
            font_family=self.font_family or default_family,
            font_size=self.font_size or default_size,
            text_transform=self.text_transform or TextTransform.NONE,
            bold=bold,
        )

    def to_storage(self) -> dict[str, Any]:
        """持久化格式（省略未设置字段）"""
        return self.model_dump(mode="json", exclude_none=True)


class TextStyle(BaseModel):
    """解析后的文本样式（所有字段已填默认值）"""

    model_config = ConfigDict(frozen=True)

    font_family: str = "Arial"
    font_size: int = 18
    text_transform: TextTransform = TextTransform.NONE
    bold: bool = False

    def with_bold(self, bold: bool = True) -> TextStyle:
        return self.model_copy(update={"bold": bold})


# 额外元素可能不是坐标（如样式设置），按原样保留
CoordinateMap = dict[str, Union[Position, dict[str, Any]]]
