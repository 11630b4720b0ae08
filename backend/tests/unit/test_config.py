"""
配置加载单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_config.py -v
"""

from pathlib import Path

import pytest

from certbuilder.config import RuntimeConfig


class TestRuntimeConfig:
    """运行期配置测试"""

    def test_default_config(self, runtime_config: RuntimeConfig):
        """测试默认配置"""
        assert runtime_config.units.dpi == 96
        assert runtime_config.page.bottom_margin_mm == 40
        assert (runtime_config.page.default_width_mm, runtime_config.page.default_height_mm) == (297, 210)
        assert runtime_config.elements.required == ["user_name", "course_list", "signature"]
        assert runtime_config.store.lock_timeout_sec == 300
        assert runtime_config.elements.max_image_width_mm == 50

    def test_missing_yaml(self, temp_dir: Path):
        """配置文件不存在时使用默认值"""
        config = RuntimeConfig.from_yaml(temp_dir / "none.yaml")
        assert config.typography.name_font_size == 24

    def test_from_yaml(self, temp_dir: Path):
        """支持 {default: x} 与直接取值两种写法，相对路径按配置目录解析"""
        yaml_path = temp_dir / "certbuilder.yaml"
        yaml_path.write_text(
            "runtime_options:\n"
            "  page:\n"
            "    bottom_margin_mm: {default: 20}\n"
            "  course_list:\n"
            "    instructor_label: Dr. Smith\n"
            "  store:\n"
            "    path: data/options.json\n",
            encoding="utf-8",
        )
        config = RuntimeConfig.from_yaml(yaml_path)
        assert config.page.bottom_margin_mm == 20
        assert config.course_list.instructor_label == "Dr. Smith"
        assert config.store.path == (temp_dir / "data" / "options.json").resolve()

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        """环境变量覆盖"""
        monkeypatch.setenv("CERTBUILDER_PAGE__BOTTOM_MARGIN_MM", "30")
        assert RuntimeConfig().page.bottom_margin_mm == 30

    def test_env_overrides_yaml(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        """环境变量优先于YAML，同一分节的其他取值保留"""
        yaml_path = temp_dir / "certbuilder.yaml"
        yaml_path.write_text(
            "runtime_options:\n"
            "  page:\n"
            "    bottom_margin_mm: {default: 40}\n"
            "    default_width_mm: {default: 280}\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("CERTBUILDER_PAGE__BOTTOM_MARGIN_MM", "30")

        config = RuntimeConfig.from_yaml(yaml_path)
        assert config.page.bottom_margin_mm == 30
        assert config.page.default_width_mm == 280

    def test_repository_config(self):
        """仓库自带配置与默认值一致"""
        path = Path(__file__).resolve().parents[3] / "config" / "certbuilder.yaml"
        config = RuntimeConfig.from_yaml(path)
        assert config.page.bottom_margin_mm == 40
        assert config.course_list.instructor_label == "Valerie Evans, BCBA-D"
