#!/usr/bin/env python3
"""
Compress uploaded GLB/glTF models with the configured optimizer command.

The optimized copies are written under the optimized root and picked up by
``/uploads/<file>`` automatically; originals are never modified.

Examples:
    python scripts/optimize_uploads.py
    python scripts/optimize_uploads.py public/uploads/abc123-model.glb
    python scripts/optimize_uploads.py --command node optimize_models.mjs {input}
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from webar.core.config import get_settings
from webar.modules.optimizer import ModelOptimizer, format_size


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("files", nargs="*", type=Path, help="models to optimize (default: every model in the upload root)")
    parser.add_argument(
        "--command",
        nargs=argparse.REMAINDER,
        help="optimizer command overriding OPTIMIZER__COMMAND; use {input} and {output} placeholders",
    )
    parser.add_argument("--timeout", type=float, default=None, help="per-model timeout in seconds")
    parser.add_argument("--force", action="store_true", help="re-run even when an up-to-date variant exists")
    return parser.parse_args(argv)


def collect_models(upload_root: Path, extensions: frozenset[str]) -> list[Path]:
    if not upload_root.is_dir():
        return []
    return sorted(path for path in upload_root.iterdir() if path.is_file() and path.suffix.lower() in extensions)


async def optimize_all(optimizer: ModelOptimizer, files: list[Path], force: bool) -> int:
    total_original = 0
    total_optimized = 0
    succeeded = 0

    for path in files:
        original_size = path.stat().st_size
        total_original += original_size
        print(f"[optimize] {path.name} ({format_size(original_size)})")
        if force:
            optimizer.target_for(path).unlink(missing_ok=True)
        result = await optimizer.optimize(path)
        if result is None or not result.exists():
            print("[optimize]   failed, original stays in use")
            continue
        optimized_size = result.stat().st_size
        total_optimized += optimized_size
        succeeded += 1
        print(f"[optimize]   {format_size(original_size)} -> {format_size(optimized_size)}")

    print("=" * 55)
    print(f"DONE: {succeeded}/{len(files)} files optimized")
    if total_original:
        saved = total_original - total_optimized
        print(f"Total: {format_size(total_original)} -> {format_size(total_optimized)} (saved {format_size(max(saved, 0))})")
    print("=" * 55)
    return 0 if succeeded == len(files) else 1


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = get_settings()

    command = args.command or list(settings.optimizer.command)
    if not command:
        raise SystemExit("no optimizer command configured (set OPTIMIZER__COMMAND or pass --command)")

    extensions = frozenset(ext.lower() for ext in settings.optimizer.extensions)
    optimizer = ModelOptimizer(
        command=command,
        optimized_root=settings.optimized_root,
        timeout=args.timeout or settings.optimizer.timeout,
        extensions=extensions,
        staging_root=settings.staging_root,
    )

    files = [path.resolve() for path in args.files] or collect_models(settings.upload_root, extensions)
    missing = [path for path in files if not path.is_file()]
    if missing:
        raise SystemExit(f"file not found: {missing[0]}")
    if not files:
        print(f"[optimize] no models found in {settings.upload_root}")
        return 0

    settings.optimized_root.mkdir(parents=True, exist_ok=True)
    return asyncio.run(optimize_all(optimizer, files, args.force))


if __name__ == "__main__":
    sys.exit(main())
