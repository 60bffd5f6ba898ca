"""Errors raised while building the post set.

Every error is fatal to the build. Per-document errors name the source
file; the global checks name the posts involved. ``BuildFailed`` carries
all of them so one run reports every problem at once.
"""

from __future__ import annotations

from collections.abc import Iterable


class BuildError(Exception):
    """Base class for everything the pipeline raises."""


class ConfigError(BuildError):
    pass


class MalformedFrontMatter(BuildError):
    def __init__(self, source: str, reason: str, line: int | None = None) -> None:
        self.source = source
        self.reason = reason
        self.line = line
        where = f"{source}:{line}" if line is not None else source
        super().__init__(f"{where}: malformed front matter: {reason}")


class InvalidPost(BuildError):
    def __init__(self, source: str, problems: Iterable[str]) -> None:
        self.source = source
        self.problems = list(problems)
        super().__init__(f"{source}: invalid post: " + "; ".join(self.problems))


class DuplicatePermalink(BuildError):
    def __init__(self, key: str, sources: Iterable[str], kind: str = "permalink") -> None:
        self.key = key
        self.kind = kind
        self.sources = sorted(sources)
        super().__init__(f"{kind} {key!r} is claimed by {', '.join(self.sources)}")


class RedirectCollision(BuildError):
    def __init__(self, path: str, slugs: Iterable[str], reason: str) -> None:
        self.path = path
        self.slugs = list(slugs)
        self.reason = reason
        super().__init__(f"redirect {path!r} ({', '.join(self.slugs)}): {reason}")


class BuildFailed(BuildError):
    """Aggregate of every error collected during one build."""

    def __init__(self, errors: Iterable[BuildError]) -> None:
        self.errors = list(errors)
        super().__init__(self.report())

    def report(self) -> str:
        lines = [f"build failed with {len(self.errors)} error(s):"]
        lines.extend(f"  - {error}" for error in self.errors)
        return "\n".join(lines)

    def of_type(self, kind: type[BuildError]) -> list[BuildError]:
        return [error for error in self.errors if isinstance(error, kind)]
