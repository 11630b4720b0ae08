"""
坐标存储 - 每个背景图一套元素坐标

职责：
1. 按背景ID读取坐标表（未配置时返回默认坐标表）
2. 校验后保存坐标表（必需元素齐全且x/y为数值）
3. 保存流程使用咨询锁（超时自动失效）避免并发覆盖

持久化格式（单个选项）：
    {background_id: {element_name: {x, y, font_size?, font_family?, text_transform?}}}

测试要点：
- test_roundtrip: 保存后读取一致
- test_missing_required_rejected: 缺少必需元素时拒绝且不改动已有数据
- test_extra_elements_passthrough: 额外元素原样保留
"""

from __future__ import annotations

import copy
import json
import logging
import math
import threading
import time
from numbers import Number
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from ..config import RuntimeConfig, get_config
from ..interfaces import ConfigurationError, ICoordinateStore, IOptionStore, StoreError
from ..models import CoordinateMap, Position

logger = logging.getLogger(__name__)


class InMemoryOptionStore(IOptionStore):
    """内存选项存储（读写均深拷贝）"""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._options: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get_option(self, name: str, default: Any = None) -> Any:
        if name not in self._options:
            return default
        return copy.deepcopy(self._options[name])

    def update_option(self, name: str, value: Any) -> bool:
        if value is None:
            self._options.pop(name, None)
        else:
            self._options[name] = copy.deepcopy(value)
        return True


class JsonFileOptionStore(IOptionStore):
    """JSON文件选项存储（整文件读写）"""

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path else get_config().store.path

    def get_option(self, name: str, default: Any = None) -> Any:
        return self._load().get(name, default)

    def update_option(self, name: str, value: Any) -> bool:
        data = self._load()
        if value is None:
            data.pop(name, None)
        else:
            data[name] = value

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            tmp.replace(self.path)
        except OSError as e:
            raise StoreError(f"选项写入失败: {self.path}: {e}") from e
        return True

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"选项读取失败: {self.path}: {e}") from e
        return data if isinstance(data, dict) else {}


class CoordinateStore(ICoordinateStore):
    """坐标存储实现"""

    # 按A4横向(1123x794px)排布，互不重叠
    DEFAULT_COORDINATES: dict[str, dict[str, Any]] = {
        "user_name": {"x": 561, "y": 80, "font_size": 24},
        "course_list": {"x": 150, "y": 150, "font_size": 18},
        "signature": {"x": 860, "y": 600},
        "page_number": {"x": 60, "y": 740, "font_size": 12},
    }

    def __init__(
        self,
        option_store: IOptionStore | None = None,
        config: RuntimeConfig | None = None,
        required_elements: list[str] | None = None,
    ):
        self.config = config or get_config()
        self.options = option_store or InMemoryOptionStore()
        self.option_name = self.config.store.option_name
        self.lock_name = f"{self.option_name}_lock"
        self.lock_timeout = self.config.store.lock_timeout_sec
        self.required_elements = (
            list(required_elements)
            if required_elements is not None
            else list(self.config.elements.required)
        )
        self._mutex = threading.Lock()

    def get_coordinates(self, background_id: Any) -> CoordinateMap:
        """获取坐标表（未配置时返回默认坐标表）"""
        all_coordinates = self.options.get_option(self.option_name, {}) or {}
        raw = all_coordinates.get(self._key(background_id))
        if not raw:
            return self.get_default_coordinates()
        return self._parse(raw)

    def save_coordinates(self, background_id: Any, coordinates: Mapping[str, Any]) -> bool:
        """校验通过才保存"""
        if not self.validate_coordinates(coordinates):
            logger.warning(f"坐标表校验失败，拒绝保存: background={background_id}")
            return False

        try:
            payload = self._to_storage(coordinates)
        except ValidationError as e:
            logger.warning(f"坐标值非法，拒绝保存: background={background_id}: {e}")
            return False

        if not self._acquire_lock():
            logger.warning(f"坐标表正被其他会话保存: background={background_id}")
            return False

        try:
            all_coordinates = self.options.get_option(self.option_name, {}) or {}
            all_coordinates[self._key(background_id)] = payload
            return bool(self.options.update_option(self.option_name, all_coordinates))
        finally:
            self._release_lock()

    def delete_coordinates(self, background_id: Any) -> bool:
        """删除坐标表（不存在时返回False）"""
        key = self._key(background_id)
        if not self._acquire_lock():
            return False

        try:
            all_coordinates = self.options.get_option(self.option_name, {}) or {}
            if key not in all_coordinates:
                return False
            del all_coordinates[key]
            return bool(self.options.update_option(self.option_name, all_coordinates))
        finally:
            self._release_lock()

    def get_default_coordinates(self) -> CoordinateMap:
        return {name: Position(**v) for name, v in self.DEFAULT_COORDINATES.items()}

    def validate_coordinates(self, coordinates: Mapping[str, Any]) -> bool:
        """必需元素齐全且x/y为数值；额外元素不校验"""
        if not isinstance(coordinates, Mapping):
            return False

        for element in self.required_elements:
            entry = coordinates.get(element)
            if entry is None:
                return False
            if isinstance(entry, Position):
                continue
            if not isinstance(entry, Mapping):
                return False
            if not (_is_numeric(entry.get("x")) and _is_numeric(entry.get("y"))):
                return False

        return True

    def _parse(self, raw: Mapping[str, Any]) -> CoordinateMap:
        """持久化格式 -> 坐标表；必需元素异常时报配置错误，额外元素不是坐标时原样保留"""
        result: CoordinateMap = {}
        for name, value in raw.items():
            try:
                result[name] = Position(**value)
            except (TypeError, ValidationError) as e:
                if name in self.required_elements:
                    raise ConfigurationError(f"坐标表元素无效: {name}: {e}") from e
                result[name] = copy.deepcopy(value)

        missing = [e for e in self.required_elements if e not in result]
        if missing:
            raise ConfigurationError(f"坐标表缺少必需元素: {', '.join(missing)}")
        return result

    def _to_storage(self, coordinates: Mapping[str, Any]) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for name, value in coordinates.items():
            if isinstance(value, Position):
                payload[name] = value.to_storage()
            elif name in self.required_elements:
                payload[name] = Position(**value).to_storage()
            else:
                payload[name] = copy.deepcopy(value)
        return payload

    def _key(self, background_id: Any) -> str:
        if background_id in (None, "", 0):
            return self.config.store.default_key
        return str(background_id)

    def _acquire_lock(self) -> bool:
        """咨询锁：锁存在且未超时则放弃"""
        with self._mutex:
            now = time.time()
            locked_at = self.options.get_option(self.lock_name)
            if locked_at and now - float(locked_at) < self.lock_timeout:
                return False
            self.options.update_option(self.lock_name, now)
            return True

    def _release_lock(self) -> None:
        with self._mutex:
            self.options.update_option(self.lock_name, None)


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if not isinstance(value, (Number, str)):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False
