import re
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

from conventional_changesets.grouping.group_model import LogicalUnit
from conventional_changesets.impact.package_impact import (
    filter_files,
    get_changed_packages,
    matches_pattern,
    resolve_changed_packages,
)
from conventional_changesets.packages.discovery import Package
from conventional_changesets.vcs.git_client import GitClient


class DummyProc(SimpleNamespace):
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


PACKAGE1 = Package(dir="/repo/root/packages/package1", name="package1", version="1.0.0")
PACKAGE2 = Package(dir="/repo/root/packages/package2", name="package2", version="1.0.0")


class TestIgnorePatterns(unittest.TestCase):
    def test_glob_matches_basename(self) -> None:
        self.assertTrue(matches_pattern("packages/a/yarn.lock", "*.lock"))
        self.assertTrue(matches_pattern("pnpm-lock.yaml", "pnpm-lock.yaml"))

    def test_string_regex_searched_in_path(self) -> None:
        self.assertTrue(matches_pattern("packages/package1/file1.ts", "package1/(.*).ts"))
        self.assertFalse(matches_pattern("packages/package2/file2.ts", "package1/(.*).ts"))

    def test_compiled_regex(self) -> None:
        self.assertTrue(matches_pattern("docs/guide.md", re.compile(r"\.md$")))
        self.assertFalse(matches_pattern("docs/guide.mdx", re.compile(r"\.md$")))

    def test_invalid_regex_falls_back_to_glob_only(self) -> None:
        self.assertFalse(matches_pattern("src/index.ts", "*.lock"))

    def test_filter_excludes_when_any_pattern_matches(self) -> None:
        files = ["packages/a/index.ts", "packages/a/yarn.lock", "packages/a/README.md"]
        self.assertEqual(filter_files(files, ["*.lock", re.compile(r"README")]), ["packages/a/index.ts"])

    def test_filter_without_patterns_keeps_everything(self) -> None:
        files = ["a", "b"]
        self.assertEqual(filter_files(files, []), files)


class TestGetChangedPackages(unittest.TestCase):
    def test_strips_repo_root(self) -> None:
        changed = get_changed_packages(["packages/package2/src/x.ts"], [PACKAGE1, PACKAGE2], "/repo/root")
        self.assertEqual(changed, [PACKAGE2])

    def test_relative_package_dirs(self) -> None:
        pkg = Package(dir="packages/package1", name="package1", version="1.0.0")
        self.assertEqual(get_changed_packages(["packages/package1/file1.ts"], [pkg], "/repo/root"), [pkg])

    def test_sibling_with_common_prefix_is_not_matched(self) -> None:
        ui = Package(dir="/repo/packages/ui", name="ui", version="1.0.0")
        ui_kit = Package(dir="/repo/packages/ui-kit", name="ui-kit", version="1.0.0")
        changed = get_changed_packages(["packages/ui-kit/button.ts"], [ui, ui_kit], "/repo")
        self.assertEqual(changed, [ui_kit])

    def test_root_package_matches_everything(self) -> None:
        root = Package(dir="/repo", name="app", version="1.0.0")
        self.assertEqual(get_changed_packages(["src/index.ts"], [root], "/repo"), [root])

    def test_no_files_no_packages(self) -> None:
        self.assertEqual(get_changed_packages([], [PACKAGE1], "/repo/root"), [])

    def test_keeps_package_order(self) -> None:
        files = ["packages/package2/a.ts", "packages/package1/b.ts"]
        self.assertEqual(get_changed_packages(files, [PACKAGE1, PACKAGE2], "/repo/root"), [PACKAGE1, PACKAGE2])


class TestResolveChangedPackages(unittest.TestCase):
    def setUp(self) -> None:
        self.calls = []

        def fake_run(client, args, check=True):
            self.calls.append(list(args))
            if args[0] == "diff":
                return DummyProc(stdout="packages/package1/file1.ts\npackages/package1/yarn.lock\n")
            if args[0] == "rev-parse":
                return DummyProc(stdout="/repo/root\n")
            raise AssertionError(f"Unexpected git command: {args}")

        patcher = patch.object(GitClient, "_run", autospec=True, side_effect=fake_run)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client = GitClient(Path("/repo/root"))

    def test_resolves_packages_over_unit_range(self) -> None:
        unit = LogicalUnit(message="feat: add X", hashes=["hash1", "hash2", "hash3"])
        changed = resolve_changed_packages(self.client, unit, [PACKAGE1, PACKAGE2])
        self.assertEqual(changed, [PACKAGE1])
        self.assertIn(["diff", "--name-only", "hash1~1..hash3"], self.calls)

    def test_all_files_ignored(self) -> None:
        unit = LogicalUnit(message="chore: bump deps", hashes=["hash1"])
        changed = resolve_changed_packages(self.client, unit, [PACKAGE1], ["*.lock", "(.*).ts"])
        self.assertEqual(changed, [])
        self.assertFalse(any(call[0] == "rev-parse" for call in self.calls))

    def test_given_repo_root_skips_lookup(self) -> None:
        unit = LogicalUnit(message="fix: y", hashes=["hash1"])
        changed = resolve_changed_packages(self.client, unit, [PACKAGE1], repo_root="/repo/root")
        self.assertEqual(changed, [PACKAGE1])
        self.assertEqual(self.calls, [["diff", "--name-only", "hash1~1..hash1"]])


if __name__ == "__main__":
    unittest.main()
