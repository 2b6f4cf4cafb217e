#!/usr/bin/env python3
"""
Print the structure of one or more GLB files (nodes, meshes, skins, animations).

Example:
    python scripts/inspect_glb.py public/uploads/abc123-model.glb public/uploads/optimized/abc123-model.glb
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from webar.modules.assets.glb import GlbFormatError, read_glb_summary
from webar.modules.optimizer import format_size


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect binary glTF files")
    parser.add_argument("files", nargs="+", type=Path)
    parser.add_argument("--json", action="store_true", help="print one JSON object per file")
    args = parser.parse_args(argv)

    status = 0
    for path in args.files:
        try:
            summary = read_glb_summary(path)
        except (OSError, GlbFormatError) as exc:
            print(f"{path}: {exc}", file=sys.stderr)
            status = 1
            continue

        if args.json:
            print(json.dumps({"file": str(path), **summary.to_mapping()}, ensure_ascii=False))
            continue

        print("=" * 60)
        print(f"File: {path.name} ({format_size(path.stat().st_size)})")
        print(f"Generator: {summary.generator or 'Unknown'}")
        print(f"Nodes: {summary.nodes}  Meshes: {summary.meshes}  Skins: {summary.skins}  Animations: {summary.animations}")
        if summary.is_rigged:
            for index, joints in enumerate(summary.joints_per_skin):
                print(f"  Skin {index}: {joints} bones")
        else:
            print("Not rigged (static mesh)")
    return status


if __name__ == "__main__":
    sys.exit(main())
