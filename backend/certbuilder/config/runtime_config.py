"""
运行期配置 - 读取 config/certbuilder.yaml

职责：
- 加载单位/页面/字体/课程列表/存储/交付等参数
- 提供环境变量覆盖机制（环境变量优先于YAML）
- 类型安全的配置访问
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


class UnitsConfig(BaseModel):
    """单位换算配置"""

    dpi: int = 96
    mm_per_inch: float = 25.4


class PageConfig(BaseModel):
    """页面配置（无背景图时使用A4横向）"""

    default_width_mm: int = 297
    default_height_mm: int = 210
    bottom_margin_mm: int = 40


class TypographyConfig(BaseModel):
    """字体配置"""

    default_font_family: str = "Arial"
    name_font_size: int = 24
    body_font_size: int = 18
    footer_font_size: int = 12
    line_height_factor: float = 1.6

    # CSS字体族 -> PDF基础字体
    font_aliases: dict[str, str] = Field(default_factory=lambda: {
        "arial": "Helvetica",
        "helvetica": "Helvetica",
        "sans-serif": "Helvetica",
        "verdana": "Helvetica",
        "times": "Times-Roman",
        "times new roman": "Times-Roman",
        "georgia": "Times-Roman",
        "serif": "Times-Roman",
        "courier": "Courier",
        "courier new": "Courier",
        "monospace": "Courier",
    })

    # 字体族 -> TTF路径（启动时注册）
    font_files: dict[str, str] = Field(default_factory=dict)

    centered_elements: list[str] = Field(default_factory=lambda: ["user_name"])
    bold_elements: list[str] = Field(default_factory=lambda: ["user_name"])


class CourseListConfig(BaseModel):
    """课程列表配置"""

    course_margin_px: int = 100
    field_margin_px: int = 10
    instructor_label: str = "Valerie Evans, BCBA-D"
    title_label: str = "Title:"
    completion_date_label: str = "Completion Date:"
    instructor_field_label: str = "Instructor:"


class ElementsConfig(BaseModel):
    """元素配置"""

    required: list[str] = Field(
        default_factory=lambda: ["user_name", "course_list", "signature"]
    )
    max_image_width_mm: int = 50
    page_number_format: str = "Page {page} of {total}"


class StoreConfig(BaseModel):
    """坐标存储配置"""

    option_name: str = "lcb_element_coordinates"
    default_key: str = "default"
    lock_timeout_sec: int = 300
    path: Path = Path("storage/options.json")


class DeliveryConfig(BaseModel):
    """交付配置"""

    max_file_size_bytes: int = 52428800
    archive_dir: Path = Path("storage/certificates")
    filename_template: str = "certificate-{user_id}-{timestamp}.pdf"


class PDFConfig(BaseModel):
    """PDF写出配置"""

    invariant: bool = True
    title: str = "Certificate"
    author: str = ""


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


SECTIONS = (
    "units",
    "page",
    "typography",
    "course_list",
    "elements",
    "store",
    "delivery",
    "pdf",
    "logging",
)


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    base_dir: Path = Path(".")

    units: UnitsConfig = Field(default_factory=UnitsConfig)
    page: PageConfig = Field(default_factory=PageConfig)
    typography: TypographyConfig = Field(default_factory=TypographyConfig)
    course_list: CourseListConfig = Field(default_factory=CourseListConfig)
    elements: ElementsConfig = Field(default_factory=ElementsConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    pdf: PDFConfig = Field(default_factory=PDFConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "CERTBUILDER_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """环境变量排在构造参数（YAML内容）之前，同名分节按字段合并"""
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        opts = data.get("runtime_options", {})

        # 以dict传入，环境变量可按字段覆盖单个分节中的部分取值
        config = cls(**{section: cls._extract(opts, section) for section in SECTIONS})

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置（支持 {default: x} 写法）"""
        section = data.get(key, {}) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            else:
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if not self.store.path.is_absolute():
            self.store.path = (base_dir / self.store.path).resolve()
        if not self.delivery.archive_dir.is_absolute():
            self.delivery.archive_dir = (base_dir / self.delivery.archive_dir).resolve()
        self.typography.font_files = {
            family: str((base_dir / p).resolve()) if not Path(p).is_absolute() else p
            for family, p in self.typography.font_files.items()
        }


# 全局配置实例
_config: RuntimeConfig | None = None

DEFAULT_CONFIG_PATH = Path("config/certbuilder.yaml")


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config


def configure_logging(config: RuntimeConfig | None = None) -> None:
    """按配置初始化根日志"""
    config = config or get_config()
    logging.basicConfig(
        level=getattr(logging, config.logging.log_level.upper(), logging.INFO),
        format=config.logging.log_format,
    )
