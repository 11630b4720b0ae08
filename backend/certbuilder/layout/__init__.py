"""
版面引擎 - 证书PDF的定位与分页

子模块：
- units: 像素/毫米换算
- coordinate_store: 元素坐标存储
- fonts: 字体解析与字宽测量
- renderer: 单元素绝对定位绘制
- course_list: 课程条目格式化
- paginator: 分页引擎
- assembler: 文档组装
- pdf_engine: PDF导出引擎
"""

from .assembler import DocumentAssembler
from .coordinate_store import CoordinateStore, InMemoryOptionStore, JsonFileOptionStore
from .course_list import CourseListFormatter
from .fonts import FontResolver
from .paginator import PaginationEngine
from .pdf_engine import PDFExporter
from .renderer import ElementRenderer
from .units import UnitConverter, px_to_mm

__all__ = [
    "UnitConverter",
    "px_to_mm",
    "CoordinateStore",
    "InMemoryOptionStore",
    "JsonFileOptionStore",
    "FontResolver",
    "ElementRenderer",
    "CourseListFormatter",
    "PaginationEngine",
    "DocumentAssembler",
    "PDFExporter",
]
