#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""site.yaml 설정 파일을 사용하여 게시글 데이터와 리다이렉트 테이블을 빌드합니다."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from blogpipe.config_utils import BASE_CONFIG_PATH, load_site_config
from blogpipe.errors import BuildError, BuildFailed, ConfigError
from blogpipe.manifest import write_manifest
from blogpipe.pipeline import build_site


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """명령줄 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(description="블로그 게시글 빌드")
    parser.add_argument("--config", type=Path, default=BASE_CONFIG_PATH, help="site.yaml 경로")
    parser.add_argument("--posts-dir", type=Path, help="게시글(Markdown) 디렉터리")
    parser.add_argument("--output-dir", type=Path, help="posts.json / redirects.json 출력 디렉터리")
    parser.add_argument("--workers", type=int, help="동시에 처리할 문서 수")
    parser.add_argument(
        "--check",
        action="store_true",
        help="검증만 수행하고 파일은 쓰지 않습니다.",
    )
    parser.add_argument("--verbose", action="store_true", help="게시글 목록을 출력합니다.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """메인 빌드 로직을 실행합니다."""
    args = parse_args(argv)

    try:
        config = load_site_config(args.config)
    except ConfigError as exc:
        print(f"설정 오류: {exc}", file=sys.stderr)
        return 1

    if args.posts_dir:
        config = replace(config, posts_dir=args.posts_dir.resolve())
    if args.output_dir:
        config = replace(config, output_dir=args.output_dir.resolve())
    if args.workers is not None and args.workers < 1:
        print("--workers는 1 이상이어야 합니다.", file=sys.stderr)
        return 1

    print(f"게시글 디렉터리: {config.posts_dir}", flush=True)
    try:
        site = build_site(config.posts_dir, config, workers=args.workers)
    except BuildFailed as exc:
        print(exc.report(), file=sys.stderr)
        return 1
    except BuildError as exc:
        print(f"빌드 오류: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        for post in site.posts:
            print(f"  {post.date:%Y-%m-%d}  {post.permalink}  ({post.source})")

    print(f"빌드 완료: 게시글 {len(site.posts)}개, 리다이렉트 {len(site.redirects)}개", flush=True)

    if args.check:
        print("--check 모드: 파일을 쓰지 않습니다.")
        return 0

    posts_path, redirects_path = write_manifest(site, config.output_dir)
    print(f"게시글 데이터 저장: {posts_path}")
    print(f"리다이렉트 데이터 저장: {redirects_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
