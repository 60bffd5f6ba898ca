"""Write the build result as JSON data files for the external renderer.

Output:
    <output_dir>/posts.json      list of post records, newest first
    <output_dir>/redirects.json  { "/legacy/path/": "/canonical/permalink/" }
"""

from __future__ import annotations

import json
from pathlib import Path

from .pipeline import Site

POSTS_FILE = "posts.json"
REDIRECTS_FILE = "redirects.json"


def write_manifest(site: Site, output_dir: Path) -> tuple[Path, Path]:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    posts_path = output_dir / POSTS_FILE
    posts_path.write_text(
        json.dumps([post.to_dict() for post in site.posts], ensure_ascii=False, indent=2),
        encoding="utf-8",
    )

    redirects_path = output_dir / REDIRECTS_FILE
    redirects = {path: site.redirects[path] for path in sorted(site.redirects)}
    redirects_path.write_text(json.dumps(redirects, ensure_ascii=False, indent=2), encoding="utf-8")

    return posts_path, redirects_path
