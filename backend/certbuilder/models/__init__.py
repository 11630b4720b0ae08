"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- Position/TextStyle: 元素坐标与样式
- CourseRecord/CourseEntry: 课程数据与课程列表条目
- Document/Page/RenderContext: 文档与分页状态
- BuildRequest/BuildResult/DeliveryPayload: 入参、结果与交付
"""

from .course import CourseEntry, CourseRecord
from .document import (
    Document,
    FixedElement,
    ImageAsset,
    Page,
    PlacedElement,
    PlacedImage,
    PlacedText,
    RenderContext,
)
from .position import (
    CoordinateMap,
    Position,
    TextStyle,
    TextTransform,
)
from .request import BuildRequest, BuildResult, DeliveryPayload, Disposition

__all__ = [
    "Position",
    "TextStyle",
    "TextTransform",
    "CoordinateMap",
    "CourseRecord",
    "CourseEntry",
    "Document",
    "FixedElement",
    "Page",
    "PlacedElement",
    "PlacedText",
    "PlacedImage",
    "ImageAsset",
    "RenderContext",
    "BuildRequest",
    "BuildResult",
    "DeliveryPayload",
    "Disposition",
]
