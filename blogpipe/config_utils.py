#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""블로그 빌드 설정(configuration)을 불러오기 위한 유틸리티 헬퍼 함수들."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta, timezone, tzinfo
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .permalinks import expand_pattern

# 이 파일의 상위 디렉터리(프로젝트 루트)를 ROOT 경로로 설정합니다.
ROOT = Path(__file__).resolve().parents[1]
# 기본 설정 파일의 경로를 지정합니다.
BASE_CONFIG_PATH = ROOT / "site.yaml"
# 로컬 환경에서만 쓰는 추가 설정 파일의 후보 경로들입니다.
OVERRIDE_CONFIG_NAMES = [
    Path("config") / "config.yaml",
]

DEFAULT_LAYOUTS = ("post",)
OFFSET_PATTERN = re.compile(r"^(?P<sign>[+-])(?P<hours>\d{2}):?(?P<minutes>\d{2})$")


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    두 개의 딕셔너리를 재귀적으로 병합합니다.
    - `override` 딕셔너리의 값이 `base` 딕셔너리의 값을 덮어씁니다.
    - 같은 키의 값이 양쪽 모두 딕셔너리이면 하위 딕셔너리도 재귀적으로 병합합니다.
    """
    merged = dict(base)
    for key, override_value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(override_value, dict):
            merged[key] = _deep_merge(base_value, override_value)
        else:
            merged[key] = override_value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: YAML 파싱 실패: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return data


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    기본 설정 파일과 로컬 설정 파일을 모두 불러와 병합한 최종 설정을 반환합니다.
    - 로컬 설정 파일은 기본 설정 파일과 같은 디렉터리 기준으로 찾습니다.
    """
    path = Path(config_path) if config_path is not None else BASE_CONFIG_PATH
    if not path.is_file():
        raise ConfigError(f"설정 파일을 찾을 수 없습니다: {path}")

    config = _read_yaml(path)
    for name in OVERRIDE_CONFIG_NAMES:
        candidate = path.parent / name
        if candidate.exists():
            # 로컬 설정이 우선순위를 가집니다.
            config = _deep_merge(config, _read_yaml(candidate))
    return config


def get_value(config: dict[str, Any], path: str, default: Any = None) -> Any:
    """
    점(.)으로 구분된 경로(`path`)로 설정 값을 가져옵니다.
    - 예: `get_value(config, "build.workers")`는 `config['build']['workers']` 값을 찾습니다.
    - 경로가 존재하지 않으면 `default` 값을 반환합니다.
    """
    node: Any = config
    for part in path.split("."):
        if isinstance(node, dict) and part in node:
            node = node[part]
        else:
            return default
    return node


def get_path(config: dict[str, Any], key: str, root: Path = ROOT, default: str | None = None) -> Path:
    """설정의 'paths' 항목 아래 `key` 경로를 `root` 기준 절대 경로로 반환합니다."""
    value = get_value(config, f"paths.{key}", default)
    if value is None:
        raise ConfigError(f"paths.{key} is not configured")
    return (Path(root) / str(value)).resolve()


def parse_utc_offset(value: Any) -> tzinfo:
    """'+09:00', '-0500', 'Z', 'UTC' 형태의 오프셋 문자열을 tzinfo로 변환합니다."""
    if value is None:
        return timezone.utc
    text = str(value).strip()
    if text.upper() in {"Z", "UTC", ""}:
        return timezone.utc
    match = OFFSET_PATTERN.match(text)
    if not match:
        raise ConfigError(f"timezone must be a UTC offset like +09:00, got {text!r}")
    delta = timedelta(hours=int(match.group("hours")), minutes=int(match.group("minutes")))
    if delta >= timedelta(hours=24):
        raise ConfigError(f"timezone offset out of range: {text!r}")
    if match.group("sign") == "-":
        delta = -delta
    return timezone(delta)


@dataclass(frozen=True)
class SiteConfig:
    """Explicit build settings passed through the pipeline."""

    permalink: str = "pretty"
    layouts: tuple[str, ...] = DEFAULT_LAYOUTS
    utc_offset: tzinfo = timezone.utc
    include_unpublished: bool = False
    workers: int | None = None
    posts_dir: Path = ROOT / "_posts"
    output_dir: Path = ROOT / "_data"

    @classmethod
    def from_mapping(cls, config: dict[str, Any], root: Path = ROOT) -> "SiteConfig":
        permalink = get_value(config, "permalink", "pretty")
        if not isinstance(permalink, str) or not permalink.strip():
            raise ConfigError(f"permalink must be a style name or a pattern, got {permalink!r}")
        permalink = permalink.strip()
        try:
            expand_pattern(permalink)
        except ValueError as exc:
            raise ConfigError(f"permalink: {exc}") from exc

        layouts = get_value(config, "layouts", list(DEFAULT_LAYOUTS))
        if isinstance(layouts, str):
            layouts = [layouts]
        if not isinstance(layouts, list) or not layouts:
            raise ConfigError("layouts must be a non-empty list of layout names")

        workers = get_value(config, "build.workers")
        if workers is not None:
            try:
                workers = int(workers)
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"build.workers must be an integer, got {workers!r}") from exc
            if workers < 1:
                raise ConfigError("build.workers must be at least 1")

        return cls(
            permalink=permalink,
            layouts=tuple(str(layout) for layout in layouts),
            utc_offset=parse_utc_offset(get_value(config, "timezone")),
            include_unpublished=bool(get_value(config, "build.unpublished", False)),
            workers=workers,
            posts_dir=get_path(config, "posts", root, default="_posts"),
            output_dir=get_path(config, "output", root, default="_data"),
        )


def load_site_config(config_path: Path | None = None) -> SiteConfig:
    path = Path(config_path) if config_path is not None else BASE_CONFIG_PATH
    return SiteConfig.from_mapping(load_config(path), root=path.resolve().parent)
