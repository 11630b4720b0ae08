"""
文档组装器单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_assembler.py -v
"""

from typing import Any

import pytest

from certbuilder.config import RuntimeConfig
from certbuilder.interfaces import ICoordinateStore, IMediaResolver, StoreError
from certbuilder.layout import CoordinateStore, DocumentAssembler, PDFExporter
from certbuilder.models import ImageAsset, Position
from certbuilder.service import InMemoryCourseDataProvider, LocalMediaResolver


class _StaticStore(ICoordinateStore):
    """固定坐标表"""

    def __init__(self, coords: dict[str, Position]):
        self.coords = coords

    def get_coordinates(self, background_id: Any) -> dict[str, Position]:
        return dict(self.coords)

    def save_coordinates(self, background_id, coordinates) -> bool:
        return False

    def delete_coordinates(self, background_id) -> bool:
        return False

    def get_default_coordinates(self) -> dict[str, Position]:
        return dict(self.coords)


class _BrokenMedia(IMediaResolver):
    """返回无效图片数据"""

    def resolve(self, image_ref: Any) -> ImageAsset | None:
        return ImageAsset(ref=image_ref, source=b"not an image", width=100, height=50)


class TestCompose:
    """文档模型组装测试"""

    def test_single_page_scenario(self, assembler: DocumentAssembler):
        """1000x750背景，姓名(100,100)，单条目 -> 单页"""
        document = assembler.compose(1, [10], 7)

        assert (document.width, document.height) == (265, 198)
        assert document.background is not None
        assert document.page_count == 1

        name = document.pages[0].find("user_name")[0]
        assert (name.anchor_x, name.y) == (26, 26)
        assert name.x < 26
        assert name.style.bold
        assert name.style.font_size == 24

        course_texts = document.pages[0].find("course_list")
        assert course_texts[0].x == 26
        assert course_texts[0].y == 79
        assert course_texts[0].style.font_size == 18

    def test_default_page_size(self, assembler: DocumentAssembler):
        """无背景：297x210，不绘制背景"""
        document = assembler.compose(1, [10], None)
        assert (document.width, document.height) == (297, 210)
        assert document.background is None

    def test_default_coordinates_used(self, assembler: DocumentAssembler):
        """无背景时使用默认坐标表"""
        document = assembler.compose(1, [10], None)
        name = document.pages[0].find("user_name")[0]
        assert name.anchor_x == 148

    def test_multi_page_repeats_fixed(self, assembler: DocumentAssembler):
        """起点79mm/条目59mm/页高198 -> 每页1条"""
        document = assembler.compose(1, [10, 11, 12, 10, 11], 7)
        assert document.page_count == 5
        for page in document.pages:
            assert len(page.find("user_name")) == 1
            assert len(page.find("signature")) == 1
            assert len(page.find("page_number")) == 1
        assert document.pages[-1].find("page_number")[0].text == "Page 5 of 5"

    def test_signature_capped(self, assembler: DocumentAssembler):
        """签名图宽度不超过50mm"""
        document = assembler.compose(1, [10], 7)
        signature = document.pages[0].images[0]
        assert signature.width == pytest.approx(50)

    def test_empty_course_ids(self, assembler: DocumentAssembler):
        """无课程：仅固定元素，单页"""
        document = assembler.compose(1, [], 7)
        assert document.page_count == 1
        assert document.pages[0].find("course_list") == []
        assert document.pages[0].find("user_name")

    def test_custom_field_painted(
        self,
        runtime_config: RuntimeConfig,
        data_provider: InMemoryCourseDataProvider,
        media_resolver: LocalMediaResolver,
        sample_coordinates: dict[str, Position],
    ):
        """自定义字段每页绘制；无取值的自定义元素跳过"""
        coords = dict(sample_coordinates)
        coords["total_credits"] = Position(x=700, y=200, font_size=14)
        coords["unused_field"] = Position(x=700, y=250)
        assembler = DocumentAssembler(_StaticStore(coords), data_provider, media_resolver, config=runtime_config)

        document = assembler.compose(1, [10, 11, 12], None)
        for page in document.pages:
            credits = page.find("total_credits")
            assert [c.text for c in credits] == ["4.5 CEUs"]
            assert credits[0].style.font_size == 14
            assert page.find("unused_field") == []

    def test_non_position_extra_ignored(
        self,
        runtime_config: RuntimeConfig,
        data_provider: InMemoryCourseDataProvider,
        media_resolver: LocalMediaResolver,
        sample_coordinates: dict[str, Position],
    ):
        """坐标表中不是坐标的额外元素不参与绘制"""
        coords = dict(sample_coordinates)
        coords["watermark"] = {"opacity": 0.3}
        assembler = DocumentAssembler(_StaticStore(coords), data_provider, media_resolver, config=runtime_config)

        document = assembler.compose(1, [10], None)
        assert document.pages[0].find("watermark") == []
        assert document.pages[0].find("user_name")

    def test_no_signature_ref(
        self,
        runtime_config: RuntimeConfig,
        coordinate_store: CoordinateStore,
        data_provider: InMemoryCourseDataProvider,
        media_resolver: LocalMediaResolver,
    ):
        """未配置签名图时不绘制签名"""
        assembler = DocumentAssembler(coordinate_store, data_provider, media_resolver, config=runtime_config)
        document = assembler.compose(1, [10], None)
        assert document.pages[0].find("signature") == []

    def test_idempotent_layout(self, assembler: DocumentAssembler):
        """相同输入元素位置一致"""
        first = assembler.compose(1, [10, 11, 12], 7)
        second = assembler.compose(1, [10, 11, 12], 7)
        assert first == second


class _UnavailableStore(_StaticStore):
    """存储读取失败"""

    def __init__(self):
        super().__init__({})

    def get_coordinates(self, background_id: Any) -> dict[str, Position]:
        raise StoreError("选项读取失败: /var/lib/options.json: Permission denied")


class TestBuild:
    """生成边界测试"""

    def test_build_pdf(self, assembler: DocumentAssembler, runtime_config: RuntimeConfig):
        """3门课程生成3页PDF"""
        result = assembler.build(1, [10, 11, 12], 7)
        assert result
        assert result.content.startswith(b"%PDF")
        assert result.page_count == 3
        assert PDFExporter(runtime_config).count_pages(result.content) == 3

    def test_build_default_page(self, assembler: DocumentAssembler):
        """无背景无课程生成单页"""
        result = assembler.build(1, [], None)
        assert result
        assert result.page_count == 1

    def test_byte_identical(self, assembler: DocumentAssembler):
        """固定元数据时两次输出一致"""
        assert assembler.build(1, [10, 11], 7).content == assembler.build(1, [10, 11], 7).content

    def test_unknown_background(self, assembler: DocumentAssembler):
        """背景不可用 -> 失败哨兵"""
        result = assembler.build(1, [10], 404)
        assert not result
        assert result.content is None
        assert "404" in result.reason

    def test_missing_required_element(
        self,
        runtime_config: RuntimeConfig,
        data_provider: InMemoryCourseDataProvider,
        media_resolver: LocalMediaResolver,
        sample_coordinates: dict[str, Position],
    ):
        """坐标表缺少必需元素返回失败哨兵"""
        coords = dict(sample_coordinates)
        del coords["signature"]
        assembler = DocumentAssembler(_StaticStore(coords), data_provider, media_resolver, config=runtime_config)
        result = assembler.build(1, [10], None)
        assert not result
        assert "signature" in result.reason

    def test_unknown_user(self, assembler: DocumentAssembler):
        """用户不存在返回失败哨兵"""
        result = assembler.build(99, [10], 7)
        assert not result

    def test_bad_image_data(
        self,
        runtime_config: RuntimeConfig,
        coordinate_store: CoordinateStore,
        data_provider: InMemoryCourseDataProvider,
    ):
        """图片数据异常 -> 失败哨兵，不抛异常"""
        assembler = DocumentAssembler(
            coordinate_store, data_provider, _BrokenMedia(), signature_ref=9, config=runtime_config
        )
        result = assembler.build(1, [10], None)
        assert not result
        assert result.reason == "证书渲染失败"
        assert "not an image" not in result.reason

    def test_unexpected_exception_generic(
        self,
        runtime_config: RuntimeConfig,
        coordinate_store: CoordinateStore,
        data_provider: InMemoryCourseDataProvider,
        media_resolver: LocalMediaResolver,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """非预期异常转换为通用失败"""
        assembler = DocumentAssembler(coordinate_store, data_provider, media_resolver, config=runtime_config)

        def boom(document):
            raise ZeroDivisionError("boom")

        monkeypatch.setattr(assembler.writer, "write", boom)
        result = assembler.build(1, [10], None)
        assert not result
        assert result.reason == "证书生成失败"

    def test_store_error_reason(
        self,
        runtime_config: RuntimeConfig,
        data_provider: InMemoryCourseDataProvider,
        media_resolver: LocalMediaResolver,
    ):
        """存储异常只返回固定原因，不带底层路径"""
        assembler = DocumentAssembler(_UnavailableStore(), data_provider, media_resolver, config=runtime_config)
        result = assembler.build(1, [10], None)
        assert not result
        assert result.reason == "坐标存储不可用"
