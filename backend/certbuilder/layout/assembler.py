"""
文档组装器 - 编排背景、固定元素与分页课程列表

流程：
1. 解析页尺寸（背景图像素尺寸换算；无背景时A4横向297x210mm）
2. 设置背景（contain缩放，居中）
3. 读取背景对应的坐标表
4. 格式化课程条目
5. 分页绘制（固定元素：姓名/签名/页码/自定义字段）
6. 序列化为PDF字节流

任何内部异常都在 build 边界转换为失败哨兵，不向调用方抛出。

测试要点：
- test_single_page_scenario: 1000x750背景，单条目单页
- test_default_page_size: 无背景时297x210且不绘制背景
- test_failure_sentinel: 图片异常时返回失败哨兵
- test_idempotent_layout: 相同输入元素位置一致
"""

from __future__ import annotations

import logging
from typing import Any

from ..config import RuntimeConfig, get_config
from ..interfaces import (
    CertBuilderError,
    ConfigurationError,
    ICoordinateStore,
    ICourseDataProvider,
    IDocumentAssembler,
    IMediaResolver,
    IPDFWriter,
    RenderError,
    StoreError,
)
from ..models import (
    BuildResult,
    CoordinateMap,
    Document,
    FixedElement,
    ImageAsset,
    Position,
    TextStyle,
)
from .course_list import CourseListFormatter
from .fonts import FontResolver
from .paginator import PAGE_NUMBER, PaginationEngine
from .pdf_engine import PDFExporter
from .renderer import ElementRenderer
from .units import UnitConverter

logger = logging.getLogger(__name__)

USER_NAME = "user_name"
COURSE_LIST = "course_list"
SIGNATURE = "signature"

RESERVED_ELEMENTS = {USER_NAME, COURSE_LIST, SIGNATURE, PAGE_NUMBER}

GENERIC_FAILURE = "证书生成失败"

# 底层库的异常文本只写日志，对外返回固定原因
PUBLIC_REASONS: dict[type[CertBuilderError], str] = {
    RenderError: "证书渲染失败",
    StoreError: "坐标存储不可用",
}


class DocumentAssembler(IDocumentAssembler):
    """文档组装器实现"""

    def __init__(
        self,
        coordinate_store: ICoordinateStore,
        data_provider: ICourseDataProvider,
        media_resolver: IMediaResolver,
        signature_ref: Any = None,
        config: RuntimeConfig | None = None,
        pdf_writer: IPDFWriter | None = None,
    ):
        self.config = config or get_config()
        self.store = coordinate_store
        self.data = data_provider
        self.media = media_resolver
        self.signature_ref = signature_ref

        self.converter = UnitConverter(self.config.units.dpi, self.config.units.mm_per_inch)
        fonts = FontResolver(self.config)
        self.renderer = ElementRenderer(self.config, self.converter, fonts)
        self.formatter = CourseListFormatter(data_provider, self.config, self.converter)
        self.engine = PaginationEngine(self.renderer, self.config)
        self.writer = pdf_writer or PDFExporter(self.config, fonts)

    def build(self, user_id: int, course_ids: list[int], background_id: Any) -> BuildResult:
        """生成证书（失败返回哨兵）"""
        try:
            document = self.compose(user_id, course_ids, background_id)
            content = self.writer.write(document)
        except CertBuilderError as e:
            logger.warning(f"证书生成失败: user={user_id} background={background_id}: {e}")
            return BuildResult.failure(public_reason(e))
        except Exception:
            logger.exception(f"证书生成异常: user={user_id} background={background_id}")
            return BuildResult.failure(GENERIC_FAILURE)

        logger.info(
            f"证书生成完成: user={user_id} courses={len(course_ids)} pages={document.page_count}"
        )
        return BuildResult.success(content, document.page_count)

    def compose(self, user_id: int, course_ids: list[int], background_id: Any) -> Document:
        """生成文档模型（不序列化，异常直接抛出）"""
        # 1. 页尺寸与背景
        background = self._resolve_background(background_id)
        document = self._new_document(background)

        # 2. 坐标表
        coordinates = self.store.get_coordinates(background_id)
        self._check_required(coordinates)

        # 3. 课程条目
        anchor = coordinates.get(COURSE_LIST)
        if not isinstance(anchor, Position):
            anchor = None
        list_style = self._style_for(COURSE_LIST, anchor) if anchor else TextStyle()
        entries = (
            self.formatter.format(user_id, list(course_ids), list_style) if anchor else []
        )

        # 4. 分页绘制
        fixed = self.fixed_elements(coordinates, user_id, list(course_ids))
        self.engine.paginate(document, entries, anchor, fixed, list_style)
        return document

    def fixed_elements(
        self,
        coordinates: CoordinateMap,
        user_id: int,
        course_ids: list[int],
    ) -> list[FixedElement]:
        """由坐标表派生每页重绘的固定元素"""
        fixed: list[FixedElement] = []

        if isinstance(coordinates.get(USER_NAME), Position):
            user_name = self.data.get_user_display_name(user_id)
            if user_name:
                fixed.append(self._text_element(USER_NAME, coordinates[USER_NAME], user_name))

        if isinstance(coordinates.get(SIGNATURE), Position) and self.signature_ref:
            signature = self.media.resolve(self.signature_ref)
            if signature is not None:
                fixed.append(FixedElement(
                    name=SIGNATURE, position=coordinates[SIGNATURE], image=signature
                ))
            else:
                logger.warning(f"签名图不可用: {self.signature_ref}")

        if isinstance(coordinates.get(PAGE_NUMBER), Position):
            fixed.append(self._text_element(
                PAGE_NUMBER, coordinates[PAGE_NUMBER], self.config.elements.page_number_format
            ))

        custom_fields = self.data.get_custom_fields(user_id, course_ids)
        for name, position in coordinates.items():
            if name in RESERVED_ELEMENTS or not isinstance(position, Position):
                continue
            value = custom_fields.get(name)
            if value is None:
                continue
            fixed.append(self._text_element(name, position, str(value)))

        return fixed

    def page_size(self, background: ImageAsset | None) -> tuple[int, int]:
        """页尺寸(mm)"""
        if background is None:
            return self.config.page.default_width_mm, self.config.page.default_height_mm
        return self.converter.point(background.width, background.height)

    def _new_document(self, background: ImageAsset | None) -> Document:
        width, height = self.page_size(background)
        return Document(width=width, height=height, background=background)

    def _resolve_background(self, background_id: Any) -> ImageAsset | None:
        if background_id in (None, "", 0):
            return None
        background = self.media.resolve(background_id)
        if background is None:
            raise ConfigurationError(f"背景图不可用: {background_id}")
        return background

    def _check_required(self, coordinates: CoordinateMap) -> None:
        missing = [e for e in self.config.elements.required if e not in coordinates]
        if missing:
            raise ConfigurationError(f"坐标表缺少必需元素: {', '.join(missing)}")

    def _text_element(self, name: str, position: Position, text: str) -> FixedElement:
        typography = self.config.typography
        return FixedElement(
            name=name,
            position=position,
            text=text,
            style=self._style_for(name, position),
            centered=name in typography.centered_elements,
        )

    def _style_for(self, name: str, position: Position) -> TextStyle:
        """按元素类别取默认字号：姓名24pt，页码12pt，其余18pt"""
        typography = self.config.typography
        if name == USER_NAME:
            size = typography.name_font_size
        elif name == PAGE_NUMBER:
            size = typography.footer_font_size
        else:
            size = typography.body_font_size
        return position.text_style(
            default_size=size,
            default_family=typography.default_font_family,
            bold=name in typography.bold_elements,
        )


def public_reason(error: CertBuilderError) -> str:
    """失败原因：配置/数据错误保留自身描述，渲染/存储错误给固定原因"""
    for error_type, reason in PUBLIC_REASONS.items():
        if isinstance(error, error_type):
            return reason
    return str(error)
