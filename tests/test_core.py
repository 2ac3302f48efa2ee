"""Integration tests for the Gityard worktree operations"""
import json
from pathlib import Path

import git
import pytest

from gityard.config import Settings
from gityard.core import Gityard, default_branch_name
from gityard.exceptions import (
    ConfigError,
    DirtyWorktreeError,
    InvalidPathError,
    MergeFailedError,
    NotFoundError,
    PathCollisionError,
    ProtectedWorktreeError,
    RepositoryError,
    ScriptExecutionError,
    ScriptNotFoundError,
    UsageError,
)
from gityard.services.git.runner import GitRunner

from conftest import commit_file, write_config


def local_branches(repo: git.Repo):
    return sorted(head.name for head in repo.heads)


class TestDefaultBranchName:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("feature-x", "feature-x"),
            ("./feature-x", "feature-x"),
            ("feature/x", "feature/x"),
            ("../trees/x", "../trees/x"),
            ("/abs/trees/x", "x"),
        ],
    )
    def test_default_branch_name(self, path, expected):
        assert default_branch_name(path) == expected


class TestLookups:
    """Test root, listing and base branch lookups."""

    def test_resolve_root(self, yard, repo_path):
        assert yard.resolve_root() == str(repo_path)

    def test_list_worktrees(self, yard, repo_path, add_worktree):
        add_worktree("feature")

        assert [r.name for r in yard.list_worktrees()] == ["repo", "feature"]

    def test_not_a_repository(self, temp_dir):
        with pytest.raises(RepositoryError):
            Gityard(str(temp_dir)).list_worktrees()

    def test_base_branch_from_config(self, yard, git_repo, repo_path):
        git_repo.git.branch("develop")
        write_config(repo_path, {"scripts": {}, "baseBranch": "develop"})

        assert yard.resolve_base_branch() == "develop"

    def test_base_branch_from_settings(self, git_repo, repo_path):
        git_repo.git.branch("release")
        write_config(repo_path, {"scripts": {}, "baseBranch": "develop"})

        yard = Gityard(str(repo_path), Settings(base_branch="release"))

        assert yard.resolve_base_branch() == "release"


class TestEnsureAndEnter:
    """Test switching to and creating worktrees."""

    def test_existing_by_short_name(self, yard, add_worktree):
        feature_path = add_worktree("feature")

        result = yard.ensure_and_enter("feature")

        assert result.created is False
        assert result.path == str(feature_path)

    def test_existing_by_full_path(self, yard, repo_path):
        result = yard.ensure_and_enter(str(repo_path))

        assert result.created is False
        assert result.path == str(repo_path)

    def test_creates_new_branch(self, yard, git_repo, temp_dir):
        """Test creating a worktree with a brand-new branch named after the path."""
        expected = temp_dir / "feature-x"

        result = yard.ensure_and_enter(str(expected))

        assert result.created is True
        assert result.path == str(expected)
        assert expected.is_dir()
        assert git.Repo(expected).active_branch.name == "feature-x"

    def test_creates_with_explicit_branch(self, yard, git_repo, temp_dir):
        result = yard.ensure_and_enter(str(temp_dir / "wt-login"), "feature/login")

        assert result.created is True
        assert "feature/login" in local_branches(git_repo)
        assert git.Repo(result.path).active_branch.name == "feature/login"

    def test_attaches_existing_local_branch(self, yard, git_repo, temp_dir):
        git_repo.git.branch("existing")

        result = yard.ensure_and_enter(str(temp_dir / "existing-wt"), "existing")

        assert git.Repo(result.path).active_branch.name == "existing"
        assert local_branches(git_repo) == ["existing", "master"]

    def test_tracks_remote_only_branch(self, git_repo, temp_dir):
        """Test that a branch found only on origin is checked out tracking it."""
        git_repo.git.branch("remote-only")
        clone = git_repo.clone(str(temp_dir / "clone"))
        clone.config_writer().set_value("user", "name", "Test User").release()
        clone.config_writer().set_value("user", "email", "test@example.com").release()

        yard = Gityard(str(temp_dir / "clone"))
        result = yard.ensure_and_enter(str(temp_dir / "remote-wt"), "remote-only")

        worktree = git.Repo(result.path)
        assert worktree.active_branch.name == "remote-only"
        assert worktree.active_branch.tracking_branch().name == "origin/remote-only"
        clone.close()

    def test_bare_repository_entry_is_not_a_switch_target(self, git_repo, temp_dir):
        """Test that the bare entry of a bare repo with a linked worktree is refused."""
        bare_path = temp_dir / "proj.git"
        bare = git_repo.clone(str(bare_path), bare=True)
        worktree_path = temp_dir / "wt"
        bare.git.worktree("add", str(worktree_path), "master")

        yard = Gityard(str(worktree_path))
        records = yard.list_worktrees()
        assert [(r.name, r.is_bare) for r in records] == [("proj.git", True), ("wt", False)]

        with pytest.raises(UsageError, match="bare repository"):
            yard.ensure_and_enter("proj.git")
        with pytest.raises(UsageError, match="bare repository"):
            yard.ensure_and_enter(str(bare_path))

        assert yard.ensure_and_enter("wt").path == str(worktree_path)
        bare.close()

    def test_relative_path_is_idempotent(self, yard, temp_dir):
        """Test that switching twice to the same relative path creates it once."""
        first = yard.ensure_and_enter("./sub-feature", "sub-feature")
        second = yard.ensure_and_enter("./sub-feature")

        assert first.created is True
        assert second.created is False
        assert second.path == first.path

    @pytest.mark.parametrize("path", ["", "   ", "../../x/../y", "a/../b"])
    def test_invalid_path(self, yard, path):
        with pytest.raises(InvalidPathError):
            yard.ensure_and_enter(path)

    def test_path_collision(self, yard, temp_dir):
        (temp_dir / "taken").mkdir()

        with pytest.raises(PathCollisionError):
            yard.ensure_and_enter(str(temp_dir / "taken"))

    def test_on_create_hooks_run_in_new_worktree(self, yard, repo_path, temp_dir):
        write_config(
            repo_path,
            {
                "scripts": {"setup": "echo ready > setup.txt"},
                "hooks": {"onCreate": ["setup", "echo raw > raw.txt"]},
            },
        )

        result = yard.ensure_and_enter(str(temp_dir / "hooked"), "hooked")

        assert (Path(result.path) / "setup.txt").read_text() == "ready\n"
        assert (Path(result.path) / "raw.txt").read_text() == "raw\n"

    def test_failed_add_raises(self, yard, git_repo, temp_dir):
        """Test that git refusing to add (branch already checked out) is a RepositoryError."""
        with pytest.raises(RepositoryError, match="Failed to create worktree"):
            yard.ensure_and_enter(str(temp_dir / "second-master"), "master")


class TestRemove:
    """Test removing worktrees."""

    def test_remove_by_name(self, yard, add_worktree):
        feature_path = add_worktree("feature")

        record = yard.remove("feature")

        assert record.path == str(feature_path)
        assert not feature_path.exists()
        assert [r.name for r in yard.list_worktrees()] == ["repo"]

    def test_missing_worktree(self, yard):
        with pytest.raises(NotFoundError, match="Worktree not found: ghost"):
            yard.remove("ghost")

    def test_dirty_worktree(self, yard, add_worktree):
        feature_path = add_worktree("feature")
        (feature_path / "scratch.txt").write_text("wip\n")

        with pytest.raises(DirtyWorktreeError):
            yard.remove("feature")

        assert feature_path.exists()

    def test_force_removes_dirty_worktree(self, yard, add_worktree):
        feature_path = add_worktree("feature")
        (feature_path / "scratch.txt").write_text("wip\n")

        yard.remove("feature", force=True)

        assert not feature_path.exists()

    def test_on_remove_hooks_run_before_removal(self, yard, repo_path, temp_dir, add_worktree):
        """Test that onRemove hooks see the worktree before it is removed."""
        add_worktree("feature")
        write_config(repo_path, {"scripts": {}, "hooks": {"onRemove": "pwd > ../removed-from.txt"}})

        yard.remove("feature")

        assert (temp_dir / "removed-from.txt").read_text().strip() == str(temp_dir / "feature")

    def test_failing_hook_keeps_worktree(self, yard, repo_path, add_worktree):
        feature_path = add_worktree("feature")
        write_config(repo_path, {"scripts": {}, "hooks": {"onRemove": "exit 2"}})

        with pytest.raises(ScriptExecutionError):
            yard.remove("feature")

        assert feature_path.exists()

    def test_main_worktree_cannot_be_removed(self, yard, repo_path):
        with pytest.raises(RepositoryError):
            yard.remove("repo")

        assert repo_path.exists()


class TestDeleteBranch:
    """Test removing a worktree together with its branch."""

    def test_safe_delete_of_merged_branch(self, yard, git_repo, add_worktree):
        feature_path = add_worktree("feature")

        result = yard.delete_branch("feature")

        assert result.branch_name == "feature"
        assert not feature_path.exists()
        assert local_branches(git_repo) == ["master"]

    def test_safe_delete_refuses_unmerged_branch(self, yard, git_repo, add_worktree):
        """Test that -d failing is reported, not escalated to -D."""
        feature_path = add_worktree("feature")
        commit_file(git.Repo(feature_path), "work.txt", "work\n", "Unmerged work")

        with pytest.raises(RepositoryError, match="Failed to delete branch"):
            yard.delete_branch("feature")

        assert "feature" in local_branches(git_repo)
        assert not feature_path.exists()

    def test_force_branch_deletes_unmerged_branch(self, yard, git_repo, add_worktree):
        feature_path = add_worktree("feature")
        commit_file(git.Repo(feature_path), "work.txt", "work\n", "Unmerged work")

        yard.delete_branch("feature", force_branch=True)

        assert local_branches(git_repo) == ["master"]

    def test_main_worktree_protected(self, yard):
        with pytest.raises(ProtectedWorktreeError, match="Cannot delete the main worktree."):
            yard.delete_branch("repo", force_branch=True, force=True)

    def test_detached_worktree_protected(self, yard, add_worktree):
        detached_path = add_worktree("detached", detach=True)

        with pytest.raises(ProtectedWorktreeError, match="detached or bare"):
            yard.delete_branch("detached", force_branch=True)

        assert detached_path.exists()

    def test_base_branch_protected(self, yard, git_repo, temp_dir):
        """Test that a worktree holding the base branch keeps it."""
        git_repo.git.checkout("-b", "other")
        base_path = temp_dir / "base"
        git_repo.git.worktree("add", str(base_path), "master")

        with pytest.raises(ProtectedWorktreeError, match="Refusing to delete base branch: master."):
            yard.delete_branch("base", force_branch=True, force=True)

        assert base_path.exists()
        assert "master" in local_branches(git_repo)

    def test_current_linked_worktree_protected(self, add_worktree):
        feature_path = add_worktree("feature")

        with pytest.raises(ProtectedWorktreeError):
            Gityard(str(feature_path)).delete_branch("feature")

    def test_main_worktree_protected_from_linked_worktree(self, add_worktree):
        feature_path = add_worktree("feature")

        with pytest.raises(ProtectedWorktreeError, match="main worktree"):
            Gityard(str(feature_path)).delete_branch("repo")


class TestMerge:
    """Test merging a worktree's branch into the base branch."""

    def test_requires_a_strategy(self, mock_runner):
        """Test that strategy errors come before any git call."""
        yard = Gityard("/anywhere", runner=mock_runner)

        with pytest.raises(UsageError, match="Specify a merge strategy"):
            yard.merge("feature")
        with pytest.raises(UsageError, match="only one merge strategy"):
            yard.merge("feature", squash=True, no_ff=True)

        mock_runner.run.assert_not_called()

    def test_no_ff_merge(self, yard, git_repo, repo_path, add_worktree):
        feature_path = add_worktree("feature")
        commit_file(git.Repo(feature_path), "feature.txt", "feature\n", "Add feature")

        result = yard.merge("feature", no_ff=True)

        assert result.base_branch == "master"
        assert result.merged_branch == "feature"
        assert (repo_path / "feature.txt").exists()
        assert len(git_repo.head.commit.parents) == 2

    def test_squash_merge(self, yard, git_repo, repo_path, add_worktree):
        """Test that a squash merge stages the branch's changes on the base."""
        feature_path = add_worktree("feature")
        commit_file(git.Repo(feature_path), "feature.txt", "feature\n", "Add feature")

        result = yard.merge("feature", squash=True)

        assert result.merged_branch == "feature"
        assert (repo_path / "feature.txt").exists()
        assert "feature.txt" in GitRunner().run(["diff", "--cached", "--name-only"], str(repo_path)).stdout

    def test_checks_out_base_when_needed(self, yard, git_repo, repo_path, add_worktree):
        git_repo.git.checkout("-b", "parking")
        feature_path = add_worktree("feature")
        commit_file(git.Repo(feature_path), "feature.txt", "feature\n", "Add feature")

        yard.merge("feature", no_ff=True)

        assert git_repo.active_branch.name == "master"

    def test_source_on_base_branch(self, yard):
        with pytest.raises(UsageError, match="already on master"):
            yard.merge("repo", squash=True)

    def test_detached_source(self, yard, add_worktree):
        add_worktree("detached", detach=True)

        with pytest.raises(UsageError, match="detached or bare"):
            yard.merge("detached", squash=True)

    def test_missing_worktree(self, yard):
        with pytest.raises(NotFoundError):
            yard.merge("ghost", squash=True)

    def test_missing_explicit_base(self, yard, add_worktree):
        add_worktree("feature")

        with pytest.raises(NotFoundError, match="Base branch not found: nope"):
            yard.merge("feature", squash=True, base_branch="nope")

    def test_dirty_base_refused(self, yard, repo_path, add_worktree):
        """Test that untracked files in the base worktree block the merge."""
        add_worktree("feature")
        (repo_path / "untracked.txt").write_text("x\n")

        with pytest.raises(DirtyWorktreeError, match="Base worktree has uncommitted changes"):
            yard.merge("feature", no_ff=True)

    def test_merge_conflict(self, yard, git_repo, repo_path, add_worktree):
        feature_path = add_worktree("feature")
        commit_file(git.Repo(feature_path), "README.md", "feature side\n", "Feature edit")
        commit_file(git_repo, "README.md", "master side\n", "Master edit")

        with pytest.raises(MergeFailedError, match="Merge failed"):
            yard.merge("feature", no_ff=True)


class TestRunScript:
    """Test running gityard.json scripts in worktrees."""

    def test_runs_root_script_in_worktree(self, yard, repo_path, add_worktree):
        feature_path = add_worktree("feature")
        write_config(repo_path, {"scripts": {"mark": ["echo a > mark.txt", "echo b >> mark.txt"]}})

        yard.run_script("feature", "mark")

        assert (feature_path / "mark.txt").read_text() == "a\nb\n"

    def test_worktree_config_takes_precedence(self, yard, repo_path, add_worktree):
        feature_path = add_worktree("feature")
        write_config(repo_path, {"scripts": {"mark": "echo root > mark.txt"}})
        write_config(feature_path, {"scripts": {"mark": "echo local > mark.txt"}})

        yard.run_script("feature", "mark")

        assert (feature_path / "mark.txt").read_text() == "local\n"

    def test_unknown_script(self, yard, repo_path):
        write_config(repo_path, {"scripts": {"test": "true"}})

        with pytest.raises(ScriptNotFoundError, match="Script not found: deploy"):
            yard.run_script("repo", "deploy")

    def test_no_config(self, yard):
        with pytest.raises(ScriptNotFoundError):
            yard.run_script("repo", "test")

    def test_missing_worktree(self, yard):
        with pytest.raises(NotFoundError):
            yard.run_script("ghost", "test")

    def test_failure_stops_sequence(self, yard, repo_path):
        write_config(repo_path, {"scripts": {"ci": ["exit 4", "echo after > after.txt"]}})

        with pytest.raises(ScriptExecutionError):
            yard.run_script("repo", "ci")

        assert not (repo_path / "after.txt").exists()


class TestInitConfig:
    def test_init_in_start_dir(self, yard, repo_path):
        path = yard.init_config()

        assert path == str(repo_path / "gityard.json")
        assert json.loads((repo_path / "gityard.json").read_text())["scripts"]["test"] == "bun test"

    def test_init_twice(self, yard):
        yard.init_config()

        with pytest.raises(ConfigError):
            yard.init_config()
