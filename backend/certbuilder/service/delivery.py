"""
交付 - 文件名、下载方式与证书归档

职责：
1. 生成建议文件名 certificate-<userId>-<timestamp>.pdf
2. 按stream_mode选择inline/attachment
3. 大小上限校验（50MB）
4. 归档目录内保存/删除证书（拒绝目录外路径）

测试要点：
- test_suggest_filename: 文件名格式
- test_oversized_rejected: 超过上限拒绝
- test_archive_unique_name: 同名文件不覆盖
- test_delete_outside_archive: 目录外路径不删除
"""

from __future__ import annotations

import re
import time
from pathlib import Path

from ..config import RuntimeConfig, get_config
from ..interfaces import DeliveryError
from ..models import DeliveryPayload, Disposition


def suggest_filename(
    user_id: int,
    timestamp: int | None = None,
    template: str = "certificate-{user_id}-{timestamp}.pdf",
) -> str:
    """建议文件名"""
    ts = int(time.time()) if timestamp is None else int(timestamp)
    return template.format(user_id=user_id, timestamp=ts)


def sanitize_filename(filename: str) -> str:
    """去掉路径与特殊字符"""
    name = Path(filename).name
    name = re.sub(r"[^A-Za-z0-9._-]+", "-", name).strip(".-")
    return name or "certificate.pdf"


def make_payload(
    content: bytes,
    user_id: int,
    stream_mode: bool,
    config: RuntimeConfig | None = None,
    timestamp: int | None = None,
) -> DeliveryPayload:
    """封装交付载荷"""
    config = config or get_config()
    limit = config.delivery.max_file_size_bytes
    if len(content) > limit:
        raise DeliveryError(f"证书文件过大: {len(content)} > {limit}")

    filename = suggest_filename(user_id, timestamp, config.delivery.filename_template)
    return DeliveryPayload(
        content=content,
        filename=sanitize_filename(filename),
        disposition=Disposition.INLINE if stream_mode else Disposition.ATTACHMENT,
    )


class CertificateArchive:
    """证书归档目录"""

    def __init__(self, archive_dir: Path | None = None, config: RuntimeConfig | None = None):
        config = config or get_config()
        self.archive_dir = Path(archive_dir or config.delivery.archive_dir)

    def save(self, content: bytes, filename: str) -> Path:
        """保存证书，重名时追加序号"""
        self.archive_dir.mkdir(parents=True, exist_ok=True)
        target = self._unique_path(sanitize_filename(filename))
        try:
            target.write_bytes(content)
        except OSError as e:
            raise DeliveryError(f"证书保存失败: {target}: {e}") from e
        return target

    def delete(self, file_path: Path | str) -> bool:
        """
        删除归档证书

        Returns:
            归档目录外路径返回False；文件不存在或删除成功返回True
        """
        path = Path(file_path).resolve()
        root = self.archive_dir.resolve()
        if root not in path.parents:
            return False
        if path.exists():
            path.unlink()
        return True

    def _unique_path(self, filename: str) -> Path:
        candidate = self.archive_dir / filename
        stem, suffix = candidate.stem, candidate.suffix
        index = 1
        while candidate.exists():
            candidate = self.archive_dir / f"{stem}-{index}{suffix}"
            index += 1
        return candidate
