"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(runtime_config, assembler):
        result = assembler.build(1, [10], None)
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from PIL import Image

from certbuilder.config import RuntimeConfig
from certbuilder.layout import (
    CoordinateStore,
    DocumentAssembler,
    ElementRenderer,
    FontResolver,
    InMemoryOptionStore,
    UnitConverter,
)
from certbuilder.models import Position
from certbuilder.service import InMemoryCourseDataProvider, LocalMediaResolver


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def runtime_config() -> RuntimeConfig:
    """运行期配置（默认值）"""
    return RuntimeConfig()


# ============================================================================
# 文件 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def make_png(path: Path, width: int, height: int, color: str = "white") -> Path:
    """写一张纯色PNG"""
    Image.new("RGB", (width, height), color).save(path, format="PNG")
    return path


@pytest.fixture
def background_png(temp_dir: Path) -> Path:
    """1000x750 背景图"""
    return make_png(temp_dir / "background.png", 1000, 750, "ivory")


@pytest.fixture
def signature_png(temp_dir: Path) -> Path:
    """400x100 签名图（超过50mm限宽）"""
    return make_png(temp_dir / "signature.png", 400, 100, "navy")


# ============================================================================
# 协作方 Fixtures
# ============================================================================

@pytest.fixture
def media_resolver(background_png: Path, signature_png: Path) -> LocalMediaResolver:
    """附件 7=背景，9=签名"""
    return LocalMediaResolver({7: background_png, 9: signature_png})


@pytest.fixture
def data_provider() -> InMemoryCourseDataProvider:
    """用户1完成课程10/11/12"""
    return InMemoryCourseDataProvider(
        users={1: "Jane Doe"},
        courses={10: "Ethics in ABA", 11: "Verbal Behavior", 12: "Supervision Basics"},
        completions={(1, 10): "March 1, 2024", (1, 11): "March 8, 2024"},
        custom_fields={1: {"total_credits": "4.5 CEUs"}},
    )


@pytest.fixture
def sample_coordinates() -> dict[str, Position]:
    """场景坐标：姓名(100,100)，课程列表(100,300)"""
    return {
        "user_name": Position(x=100, y=100),
        "course_list": Position(x=100, y=300),
        "signature": Position(x=700, y=600),
        "page_number": Position(x=40, y=720),
    }


@pytest.fixture
def coordinate_store(runtime_config: RuntimeConfig) -> CoordinateStore:
    """内存坐标存储"""
    return CoordinateStore(InMemoryOptionStore(), runtime_config)


@pytest.fixture
def assembler(
    runtime_config: RuntimeConfig,
    coordinate_store: CoordinateStore,
    data_provider: InMemoryCourseDataProvider,
    media_resolver: LocalMediaResolver,
    sample_coordinates: dict[str, Position],
) -> DocumentAssembler:
    """已为背景7配置坐标的组装器"""
    assert coordinate_store.save_coordinates(7, sample_coordinates)
    return DocumentAssembler(
        coordinate_store,
        data_provider,
        media_resolver,
        signature_ref=9,
        config=runtime_config,
    )


# ============================================================================
# 版面组件 Fixtures
# ============================================================================

@pytest.fixture
def converter() -> UnitConverter:
    return UnitConverter()


@pytest.fixture
def fonts(runtime_config: RuntimeConfig) -> FontResolver:
    return FontResolver(runtime_config)


@pytest.fixture
def renderer(runtime_config: RuntimeConfig, converter: UnitConverter, fonts: FontResolver) -> ElementRenderer:
    return ElementRenderer(runtime_config, converter, fonts)
