"""Build the complete post set and redirect table from a posts directory.

Each document is parsed and assembled independently on a thread pool.
Once every document is done, the duplicate-permalink check and the
redirect table build run over the whole set. Any error anywhere fails
the build with a single ``BuildFailed`` listing all of them.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from .config_utils import SiteConfig
from .errors import BuildError, BuildFailed, MalformedFrontMatter
from .front_matter import parse_front_matter
from .permalinks import POST_EXTENSIONS, find_duplicate_permalinks
from .posts import Post, assemble_post
from .redirects import RedirectTable, build_redirect_table, normalize_legacy_path


@dataclass(frozen=True)
class Site:
    posts: tuple[Post, ...]
    redirects: RedirectTable

    def get(self, slug: str) -> Post | None:
        for post in self.posts:
            if post.slug == slug:
                return post
        return None

    def resolve(self, path: str) -> Post | None:
        """Find the post served at ``path``, following redirects."""
        target = self.redirects.lookup(path) or path
        for post in self.posts:
            if post.permalink == target:
                return post
        try:
            target = normalize_legacy_path(target)
        except ValueError:
            return None
        for post in self.posts:
            if post.permalink == target:
                return post
        return None


def find_documents(posts_dir: Path) -> list[Path]:
    return sorted(
        path
        for path in Path(posts_dir).iterdir()
        if path.is_file() and path.suffix.lower() in POST_EXTENSIONS and not path.name.startswith(".")
    )


def load_post(path: Path, config: SiteConfig) -> Post:
    """Raw -> Parsed -> Resolved -> Assembled for one document."""
    source = path.name
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedFrontMatter(source, f"not valid UTF-8 text ({exc.reason})") from exc
    metadata, body = parse_front_matter(text, source=source)
    return assemble_post(source, metadata, body, config)


def _sort_key(post: Post):
    return (-post.date.timestamp(), post.slug)


def build_site(posts_dir: Path, config: SiteConfig, workers: int | None = None) -> Site:
    posts_dir = Path(posts_dir)
    if not posts_dir.is_dir():
        raise BuildFailed([BuildError(f"posts directory not found: {posts_dir}")])

    documents = find_documents(posts_dir)
    assembled: dict[str, Post] = {}
    errors: dict[str, BuildError] = {}

    with ThreadPoolExecutor(max_workers=workers or config.workers) as executor:
        futures = {executor.submit(load_post, path, config): path for path in documents}
        for future in as_completed(futures):
            path = futures[future]
            try:
                assembled[path.name] = future.result()
            except BuildError as exc:
                errors[path.name] = exc
            except OSError as exc:
                errors[path.name] = BuildError(f"{path.name}: cannot read file: {exc}")

    # Everything below needs the full set.
    collected: list[BuildError] = [errors[name] for name in sorted(errors)]
    posts = [
        assembled[name]
        for name in sorted(assembled)
        if assembled[name].published or config.include_unpublished
    ]

    collected.extend(find_duplicate_permalinks(posts))
    redirects = None
    try:
        redirects = build_redirect_table(posts)
    except BuildFailed as exc:
        collected.extend(exc.errors)

    if collected:
        raise BuildFailed(collected)
    return Site(posts=tuple(sorted(posts, key=_sort_key)), redirects=redirects)
