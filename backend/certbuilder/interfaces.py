"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 外部协作方（选项存储/课程数据/媒体文件）只以接口形式出现
3. 便于单元测试和mock替换

使用方式：
    from certbuilder.interfaces import ICourseDataProvider

    class MyProvider(ICourseDataProvider):
        def get_user_display_name(self, user_id: int) -> str:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from .models import (
        BuildResult,
        CoordinateMap,
        CourseEntry,
        Document,
        FixedElement,
        ImageAsset,
        Page,
        Position,
        RenderContext,
        TextStyle,
    )


# ============================================================================
# 外部协作方接口
# ============================================================================

class IOptionStore(ABC):
    """键值选项存储接口（对应站点选项表）"""

    @abstractmethod
    def get_option(self, name: str, default: Any = None) -> Any:
        """读取选项，不存在时返回default"""
        ...

    @abstractmethod
    def update_option(self, name: str, value: Any) -> bool:
        """写入选项，返回是否成功"""
        ...


class ICourseDataProvider(ABC):
    """课程/用户数据接口 - 输入已由调用方校验"""

    @abstractmethod
    def get_user_display_name(self, user_id: int) -> str:
        """用户显示名"""
        ...

    @abstractmethod
    def get_course_title(self, course_id: int) -> str | None:
        """课程标题，不存在时返回None"""
        ...

    @abstractmethod
    def get_course_completion_date(self, user_id: int, course_id: int) -> str:
        """
        课程完成日期（已格式化）

        Returns:
            格式化日期字符串，未完成时返回空串
        """
        ...

    def get_custom_fields(self, user_id: int, course_ids: list[int]) -> dict[str, str]:
        """自定义字段取值（如学分合计），默认无"""
        return {}


class IMediaResolver(ABC):
    """媒体文件解析接口 - 背景图/签名图"""

    @abstractmethod
    def resolve(self, image_ref: Any) -> ImageAsset | None:
        """
        解析图片引用

        Args:
            image_ref: 附件ID或路径

        Returns:
            图片资源（含像素宽高），引用为空或不存在时返回None
        """
        ...


# ============================================================================
# 版面引擎接口
# ============================================================================

class ICoordinateStore(ABC):
    """坐标存储接口 - 每个背景一套元素坐标"""

    @abstractmethod
    def get_coordinates(self, background_id: Any) -> CoordinateMap:
        """获取背景对应的坐标表，未配置时返回默认坐标表"""
        ...

    @abstractmethod
    def save_coordinates(self, background_id: Any, coordinates: Mapping[str, Any]) -> bool:
        """校验通过才保存，返回是否成功"""
        ...

    @abstractmethod
    def delete_coordinates(self, background_id: Any) -> bool:
        """删除背景对应的坐标表"""
        ...

    @abstractmethod
    def get_default_coordinates(self) -> CoordinateMap:
        """默认坐标表"""
        ...


class IElementRenderer(ABC):
    """元素绘制器接口 - 绝对定位绘制到页面"""

    @abstractmethod
    def render_text(self, page: Page, content: str, position: Position, style: TextStyle) -> None:
        """绘制文本元素"""
        ...

    @abstractmethod
    def render_image(self, page: Page, image: ImageAsset, position: Position) -> None:
        """绘制图片元素"""
        ...


class ICourseListFormatter(ABC):
    """课程列表格式化接口"""

    @abstractmethod
    def format(
        self,
        user_id: int,
        course_ids: list[int],
        style: TextStyle,
    ) -> list[CourseEntry]:
        """
        将课程ID展开为带高度的条目

        Args:
            user_id: 用户ID
            course_ids: 课程ID列表（保持顺序）
            style: 课程列表文本样式

        Returns:
            条目列表（高度单位mm）
        """
        ...


class IPaginationEngine(ABC):
    """分页引擎接口"""

    @abstractmethod
    def plan(self, heights: list[int], start_y: int, page_height: int) -> list[list[int]]:
        """
        计算每页放置的条目下标

        Args:
            heights: 条目高度(mm)，按顺序
            start_y: 起始游标(mm)
            page_height: 页高(mm)

        Returns:
            每页的条目下标列表（至少1页）
        """
        ...

    @abstractmethod
    def paginate(
        self,
        document: Document,
        entries: list[CourseEntry],
        anchor: Position | None,
        fixed: list[FixedElement],
        style: TextStyle,
    ) -> RenderContext:
        """在文档上逐页绘制固定元素与课程条目，返回最终分页状态"""
        ...


class IPDFWriter(ABC):
    """PDF写出接口"""

    @abstractmethod
    def write(self, document: Document) -> bytes:
        """将文档序列化为PDF字节流"""
        ...

    @abstractmethod
    def count_pages(self, pdf_bytes: bytes) -> int:
        """计算PDF页数"""
        ...


class IDocumentAssembler(ABC):
    """文档组装接口"""

    @abstractmethod
    def build(self, user_id: int, course_ids: list[int], background_id: Any) -> BuildResult:
        """
        生成证书

        Returns:
            成功时含PDF字节流，失败时为失败哨兵（不抛异常）
        """
        ...


# ============================================================================
# 异常定义
# ============================================================================

class CertBuilderError(Exception):
    """基础异常"""
    pass


class ConfigurationError(CertBuilderError):
    """配置错误（坐标表缺少必需元素/背景不可用）"""
    pass


class DataError(CertBuilderError):
    """数据错误（用户/课程引用无法解析）"""
    pass


class RenderError(CertBuilderError):
    """绘制错误（PDF写出/图片数据异常）"""
    pass


class StoreError(CertBuilderError):
    """存储错误"""
    pass


class DeliveryError(CertBuilderError):
    """交付错误"""
    pass
