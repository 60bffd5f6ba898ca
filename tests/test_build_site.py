"""
Tests for the build_site command and the JSON manifest it writes.
"""

import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import build_site
from blogpipe.config_utils import SiteConfig
from blogpipe.manifest import write_manifest
from blogpipe.pipeline import build_site as build

FOO = """---
layout: post
title: "Foo"
date: 2020-01-12
categories: swiftui
redirect_from: /swiftui-foo
---

```swift
Text("Foo")
```
"""

BAR = """---
layout: post
title: "Bar"
date: 2020-02-01
redirect_from: /swiftui-foo
---
Bar
"""


class BlogTestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.posts_dir = self.root / "_posts"
        self.posts_dir.mkdir()
        (self.posts_dir / "2020-01-12-foo.md").write_text(FOO, encoding="utf-8")
        (self.root / "site.yaml").write_text(
            "permalink: pretty\nlayouts: [post]\npaths:\n  posts: _posts\n  output: _data\n",
            encoding="utf-8",
        )

    def tearDown(self):
        self._tmp.cleanup()

    def run_main(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = build_site.main(["--config", str(self.root / "site.yaml"), *argv])
        return code, out.getvalue(), err.getvalue()


class TestManifest(BlogTestCase):

    def test_write_manifest(self):
        site = build(self.posts_dir, SiteConfig())
        posts_path, redirects_path = write_manifest(site, self.root / "out")

        posts = json.loads(posts_path.read_text(encoding="utf-8"))
        self.assertEqual(len(posts), 1)
        self.assertEqual(posts[0]["slug"], "foo")
        self.assertEqual(posts[0]["permalink"], "/swiftui/2020/01/12/foo/")
        self.assertEqual(posts[0]["categories"], ["swiftui"])
        self.assertTrue(posts[0]["body"].startswith("```swift"))

        redirects = json.loads(redirects_path.read_text(encoding="utf-8"))
        self.assertEqual(redirects, {"/swiftui-foo/": "/swiftui/2020/01/12/foo/"})


class TestBuildSiteCommand(BlogTestCase):

    def test_builds_and_writes_data(self):
        code, out, err = self.run_main("--verbose")
        self.assertEqual(code, 0, err)
        self.assertIn("/swiftui/2020/01/12/foo/", out)
        self.assertTrue((self.root / "_data" / "posts.json").is_file())
        self.assertTrue((self.root / "_data" / "redirects.json").is_file())

    def test_check_writes_nothing(self):
        code, _, _ = self.run_main("--check")
        self.assertEqual(code, 0)
        self.assertFalse((self.root / "_data").exists())

    def test_output_dir_override(self):
        code, _, _ = self.run_main("--output-dir", str(self.root / "elsewhere"))
        self.assertEqual(code, 0)
        self.assertTrue((self.root / "elsewhere" / "posts.json").is_file())

    def test_failure_prints_report(self):
        (self.posts_dir / "2020-02-01-bar.md").write_text(BAR, encoding="utf-8")
        code, _, err = self.run_main()
        self.assertEqual(code, 1)
        self.assertIn("/swiftui-foo/", err)
        self.assertIn("foo", err)
        self.assertIn("bar", err)
        self.assertFalse((self.root / "_data").exists())

    def test_bad_config(self):
        (self.root / "site.yaml").write_text("permalink: /:nope/\n", encoding="utf-8")
        code, _, err = self.run_main()
        self.assertEqual(code, 1)
        self.assertIn(":nope", err)

    def test_invalid_workers(self):
        code, _, _ = self.run_main("--workers", "0")
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
