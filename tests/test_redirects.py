"""
Unit tests for the redirect table builder.
"""

import unittest
from types import SimpleNamespace

from blogpipe.errors import BuildFailed, RedirectCollision
from blogpipe.redirects import (
    RedirectTable,
    RedirectTableBuilder,
    build_redirect_table,
    normalize_legacy_path,
)


def _post(slug, permalink, *redirects):
    return SimpleNamespace(slug=slug, permalink=permalink, redirect_from=frozenset(redirects))


class TestNormalizeLegacyPath(unittest.TestCase):

    def test_adds_trailing_slash(self):
        self.assertEqual(normalize_legacy_path("/old-path"), "/old-path/")
        self.assertEqual(normalize_legacy_path(" /old-path/ "), "/old-path/")

    def test_keeps_file_names(self):
        self.assertEqual(normalize_legacy_path("/2019/05/foo.html"), "/2019/05/foo.html")

    def test_collapses_slashes(self):
        self.assertEqual(normalize_legacy_path("/blog//foo"), "/blog/foo/")

    def test_rejects_relative_paths_and_urls(self):
        for value in ("old-path", "https://example.com/old", "//example.com/old", ""):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    normalize_legacy_path(value)


class TestBuildRedirectTable(unittest.TestCase):

    def test_maps_legacy_paths_to_permalinks(self):
        posts = [
            _post("foo", "/swiftui/2020/01/12/foo/", "/foo/", "/swiftui-foo/"),
            _post("bar", "/2020/02/01/bar/"),
        ]
        table = build_redirect_table(posts)
        self.assertIsInstance(table, RedirectTable)
        self.assertEqual(
            dict(table),
            {"/foo/": "/swiftui/2020/01/12/foo/", "/swiftui-foo/": "/swiftui/2020/01/12/foo/"},
        )
        self.assertEqual(table.source_of("/foo/"), "foo")
        self.assertEqual(table.lookup("/swiftui-foo"), "/swiftui/2020/01/12/foo/")
        self.assertIsNone(table.lookup("/missing/"))

    def test_table_is_read_only(self):
        table = build_redirect_table([_post("foo", "/foo/", "/old/")])
        with self.assertRaises(TypeError):
            table["/new/"] = "/foo/"

    def test_same_legacy_path_in_two_posts(self):
        posts = [_post("foo", "/foo/", "/old-path/"), _post("bar", "/bar/", "/old-path/")]
        with self.assertRaises(BuildFailed) as ctx:
            build_redirect_table(posts)
        collisions = ctx.exception.of_type(RedirectCollision)
        self.assertEqual(len(collisions), 1)
        self.assertEqual(collisions[0].path, "/old-path/")
        self.assertEqual(collisions[0].slugs, ["foo", "bar"])

    def test_legacy_path_equal_to_another_permalink(self):
        posts = [_post("foo", "/foo/"), _post("bar", "/bar/", "/foo/")]
        with self.assertRaises(BuildFailed) as ctx:
            build_redirect_table(posts)
        collision = ctx.exception.errors[0]
        self.assertIsInstance(collision, RedirectCollision)
        self.assertEqual(collision.slugs, ["bar", "foo"])

    def test_redirect_to_itself(self):
        with self.assertRaises(BuildFailed) as ctx:
            build_redirect_table([_post("foo", "/foo/", "/foo/")])
        self.assertIn("own permalink", ctx.exception.errors[0].reason)

    def test_posts_sharing_a_slug_still_collide(self):
        posts = [
            _post("foo", "/2020/01/12/foo/", "/old/"),
            _post("foo", "/2021/01/01/foo/", "/old/"),
        ]
        with self.assertRaises(BuildFailed) as ctx:
            build_redirect_table(posts)
        collisions = ctx.exception.of_type(RedirectCollision)
        self.assertEqual(len(collisions), 1)
        self.assertEqual(collisions[0].path, "/old/")
        self.assertEqual(collisions[0].reason, "declared by two posts")

    def test_redirect_to_permalink_of_post_with_same_slug(self):
        posts = [_post("foo", "/a/"), _post("foo", "/b/", "/a/")]
        with self.assertRaises(BuildFailed) as ctx:
            build_redirect_table(posts)
        collision = ctx.exception.errors[0]
        self.assertEqual(collision.reason, "is the permalink of 'foo'")
        self.assertEqual(collision.slugs, ["foo", "foo"])

    def test_reports_every_collision(self):
        posts = [
            _post("a", "/a/", "/x/", "/y/"),
            _post("b", "/b/", "/x/", "/y/"),
        ]
        with self.assertRaises(BuildFailed) as ctx:
            build_redirect_table(posts)
        self.assertEqual([c.path for c in ctx.exception.errors], ["/x/", "/y/"])


class TestRedirectTableBuilder(unittest.TestCase):

    def test_add_raises_collision_directly(self):
        foo, bar = _post("foo", "/foo/"), _post("bar", "/bar/")
        builder = RedirectTableBuilder([foo, bar])
        builder.add(foo, "/old/")
        with self.assertRaises(RedirectCollision):
            builder.add(bar, "/old/")

    def test_write_once(self):
        foo = _post("foo", "/foo/")
        builder = RedirectTableBuilder([foo])
        builder.build()
        with self.assertRaises(RuntimeError):
            builder.add(foo, "/old/")


if __name__ == "__main__":
    unittest.main()
