import json
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

from click.testing import CliRunner

import conventional_changesets.cli as cli
from conventional_changesets.changesets.storage import read_changesets
from conventional_changesets.vcs.git_client import GitClient, GitError


class DummyProc(SimpleNamespace):
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


class FakeRepository:
    """Answers git commands for a two-package workspace on ``main``."""

    messages = {
        "c1": "feat: add X",
        "c2": "wip",
        "c3": "fix: bug Y",
        "c4": "docs: update readme",
    }
    diffs = {
        "c1~1..c2": "packages/a/index.ts\n",
        "c3~1..c3": "packages/b/index.ts\nyarn.lock\n",
        "c4~1..c4": "packages/a/README.md\n",
    }

    def __init__(self, root: Path):
        self.root = root
        self.fail_on = None
        self.history = "c4\nc3\nc2\nc1\n"

    def __call__(self, client, args, check=True):
        if self.fail_on and args[0] == self.fail_on:
            raise GitError(f"fatal: {self.fail_on} failed")
        if args[0] == "fetch":
            return DummyProc()
        if args[:2] == ["rev-parse", "--abbrev-ref"]:
            return DummyProc(stdout="main\n")
        if args[:2] == ["rev-parse", "--show-toplevel"]:
            return DummyProc(stdout=f"{self.root}\n")
        if args[0] == "describe":
            return DummyProc(stdout="v1.0.0\n")
        if args[:2] == ["rev-list", "--ancestry-path"]:
            return DummyProc(stdout=self.history)
        if args[0] == "log":
            return DummyProc(stdout=self.messages[args[-1]])
        if args[0] == "diff":
            return DummyProc(stdout=self.diffs[args[-1]])
        raise AssertionError(f"Unexpected git command: {args}")


def make_workspace(root: Path, config=None) -> None:
    (root / ".git").mkdir()
    (root / ".changeset").mkdir()
    (root / ".changeset" / "config.json").write_text(json.dumps(config or {"baseBranch": "main"}))
    (root / "package.json").write_text(json.dumps({"name": "root", "private": True, "workspaces": ["packages/*"]}))
    for name in ("a", "b"):
        package_dir = root / "packages" / name
        package_dir.mkdir(parents=True)
        (package_dir / "package.json").write_text(json.dumps({"name": name, "version": "1.0.0"}))


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def _invoke(self, root: Path, fake: FakeRepository, *args):
        with patch.object(GitClient, "_run", autospec=True, side_effect=fake):
            return self.runner.invoke(cli.main, ["--cwd", str(root), *args])

    def test_writes_new_changesets(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            make_workspace(root)
            result = self._invoke(root, FakeRepository(root))

            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            recorded = read_changesets(root)
            self.assertEqual(
                sorted((c.summary, [(r.name, str(r.type)) for r in c.releases]) for c in recorded),
                [("feat: add X", [("a", "minor")]), ("fix: bug Y", [("b", "patch")])],
            )
            self.assertIn("Wrote 2 changesets", result.output)

    def test_second_run_writes_nothing(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            make_workspace(root)
            self._invoke(root, FakeRepository(root))
            result = self._invoke(root, FakeRepository(root))

            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            self.assertIn("No new changesets to write.", result.output)
            self.assertEqual(len(read_changesets(root)), 2)

    def test_dry_run_and_ignored_files(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            make_workspace(root)
            result = self._invoke(root, FakeRepository(root), "--dry-run", "--ignore-file", "packages/b/*")

            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            self.assertIn("Would write: feat: add X [a@minor]", result.output)
            self.assertNotIn("fix: bug Y", result.output)
            self.assertEqual(read_changesets(root), [])

    def test_ignored_package(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            make_workspace(root, config={"ignore": ["b"]})
            result = self._invoke(root, FakeRepository(root), "--dry-run")

            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            self.assertNotIn("b@patch", result.output)

    def test_custom_rules(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            make_workspace(root)
            rules = root / "rules.json"
            rules.write_text(json.dumps([{"type": "docs", "release": "patch"}]))
            result = self._invoke(root, FakeRepository(root), "--dry-run", "--rules", str(rules))

            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            self.assertIn("docs: update readme [a@patch]", result.output)
            self.assertNotIn("feat: add X", result.output)

    def test_missing_config(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            make_workspace(root)
            (root / ".changeset" / "config.json").unlink()
            fake = FakeRepository(root)
            fake.fail_on = "fetch"
            result = self._invoke(root, fake)

            self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_not_a_repository(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            with patch.object(GitClient, "find_repo_root", return_value=None):
                result = self.runner.invoke(cli.main, ["--cwd", str(root)])

            self.assertEqual(result.exit_code, cli.EXIT_NO_REPO)

    def test_git_failure(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            make_workspace(root)
            fake = FakeRepository(root)
            fake.fail_on = "diff"
            result = self._invoke(root, fake)

            self.assertEqual(result.exit_code, cli.EXIT_VCS_FAILURE)
            self.assertEqual(read_changesets(root), [])

    def test_unreadable_existing_changeset(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            make_workspace(root)
            (root / ".changeset" / "broken.md").write_text("no front matter")
            result = self._invoke(root, FakeRepository(root))

            self.assertEqual(result.exit_code, cli.EXIT_CHANGESET_ERROR)

    def test_no_commits_warns_and_writes_nothing(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            make_workspace(root)
            fake = FakeRepository(root)
            fake.history = ""
            result = self._invoke(root, fake)

            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            self.assertIn("⚠ No commits found since the last release point.", result.output)
            self.assertIn("No new changesets to write.", result.output)
            self.assertEqual(read_changesets(root), [])

    def test_version(self) -> None:
        result = self.runner.invoke(cli.main, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("conventional-changesets", result.output)


if __name__ == "__main__":
    unittest.main()
