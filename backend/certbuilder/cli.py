"""
命令行入口

用法：
    python -m certbuilder render --request request.json --data data.json --out cert.pdf
    python -m certbuilder coordinates show --background 12
    python -m certbuilder coordinates save --background 12 --file coords.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .config import configure_logging, get_config, reload_config
from .interfaces import CertBuilderError
from .layout import CoordinateStore, DocumentAssembler, JsonFileOptionStore
from .models import Position
from .service import CertificateService, InMemoryCourseDataProvider, LocalMediaResolver


def _load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="certbuilder", description="证书PDF版面引擎")
    parser.add_argument("--config", default="", help="运行期配置YAML（默认：config/certbuilder.yaml）")
    parser.add_argument("--options", default="", help="选项存储JSON文件（覆盖配置）")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="生成证书PDF")
    render.add_argument("--request", required=True, help="请求JSON：user_id/course_ids/background_id/stream_mode")
    render.add_argument("--data", required=True, help="用户/课程数据JSON")
    render.add_argument("--media", default="", help="附件ID -> 图片路径映射JSON")
    render.add_argument("--signature", default="", help="签名图附件ID或路径")
    render.add_argument("--out", default="", help="输出PDF路径（默认使用建议文件名）")

    coords = sub.add_parser("coordinates", help="查看/保存坐标表")
    coords.add_argument("action", choices=["show", "save", "delete"])
    coords.add_argument("--background", default="", help="背景ID（空为默认坐标表）")
    coords.add_argument("--file", default="", help="坐标表JSON（save时必填）")

    return parser


def _cmd_render(args: argparse.Namespace, store: CoordinateStore) -> int:
    config = get_config()
    media_map = _load_json(args.media) if args.media else {}
    media = LocalMediaResolver(media_map)
    data = InMemoryCourseDataProvider.from_dict(_load_json(args.data))

    assembler = DocumentAssembler(
        store, data, media, signature_ref=args.signature or None, config=config
    )
    service = CertificateService(assembler, config)

    request = _load_json(args.request)
    payload = service.deliver(request)
    out = Path(args.out) if args.out else Path(payload.filename)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(payload.content)
    print(f"{out}: {payload.size} bytes ({payload.disposition.value})")
    return 0


def _cmd_coordinates(args: argparse.Namespace, store: CoordinateStore) -> int:
    background = args.background or None

    if args.action == "show":
        coords = store.get_coordinates(background)
        data = {k: v.to_storage() if isinstance(v, Position) else v for k, v in coords.items()}
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return 0

    if args.action == "delete":
        ok = store.delete_coordinates(background)
        print("已删除" if ok else "未找到坐标表")
        return 0 if ok else 1

    if not args.file:
        print("save 需要 --file")
        return 2
    ok = store.save_coordinates(background, _load_json(args.file))
    print("已保存" if ok else "校验失败，未保存")
    return 0 if ok else 1


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    config = reload_config(args.config) if args.config else get_config()
    configure_logging(config)

    options_path = Path(args.options) if args.options else config.store.path
    store = CoordinateStore(JsonFileOptionStore(options_path), config)

    try:
        if args.command == "render":
            return _cmd_render(args, store)
        return _cmd_coordinates(args, store)
    except CertBuilderError as e:
        print(f"错误: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
