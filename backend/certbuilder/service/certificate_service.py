"""
证书服务 - 请求编排

职责：
1. 校验请求结构（user_id/course_ids/background_id/stream_mode）
2. 调用文档组装器生成PDF
3. 封装交付载荷（文件名/下载方式），可选归档

测试要点：
- test_deliver_stream_mode: inline/attachment选择
- test_deliver_failure: 生成失败时抛DeliveryError并带原因
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..config import RuntimeConfig, get_config
from ..interfaces import DeliveryError, IDocumentAssembler
from ..models import BuildRequest, BuildResult, DeliveryPayload
from .delivery import CertificateArchive, make_payload

logger = logging.getLogger(__name__)


class CertificateService:
    """证书服务"""

    def __init__(
        self,
        assembler: IDocumentAssembler,
        config: RuntimeConfig | None = None,
        archive: CertificateArchive | None = None,
    ):
        self.config = config or get_config()
        self.assembler = assembler
        self.archive = archive

    def generate(self, request: BuildRequest | dict[str, Any]) -> BuildResult:
        """生成证书（请求非法时返回失败哨兵）"""
        try:
            req = request if isinstance(request, BuildRequest) else BuildRequest(**request)
        except (TypeError, ValueError, ValidationError) as e:
            logger.warning(f"请求参数非法: {e}")
            return BuildResult.failure("请求参数非法")

        return self.assembler.build(req.user_id, req.course_ids, req.background_id)

    def deliver(
        self,
        request: BuildRequest | dict[str, Any],
        timestamp: int | None = None,
    ) -> DeliveryPayload:
        """生成并封装交付载荷"""
        try:
            req = request if isinstance(request, BuildRequest) else BuildRequest(**request)
        except (TypeError, ValueError, ValidationError) as e:
            raise DeliveryError("请求参数非法") from e

        result = self.generate(req)
        if not result:
            raise DeliveryError(result.reason or "证书生成失败")

        payload = make_payload(result.content, req.user_id, req.stream_mode, self.config, timestamp)
        if self.archive is not None:
            saved = self.archive.save(payload.content, payload.filename)
            logger.info(f"证书已归档: {saved}")
        return payload

    def save_to(self, request: BuildRequest | dict[str, Any], output_path: Path) -> Path:
        """生成并写入指定路径"""
        payload = self.deliver(request)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(payload.content)
        return output_path
