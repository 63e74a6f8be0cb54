"""Tests for the pre-commit hook installer."""

import logging
import os
import subprocess
from pathlib import Path

import pytest

from kgp.hooks.install import (
    BASH_SHEBANG,
    HOOK_END_MARKER,
    HOOK_START_MARKER,
    HUSKY_SCRIPT,
    MalformedHookBlockError,
    PreCommitHookInstaller,
    check_hook_status,
    create_git_hook,
    install_pre_commit_hook,
    remove_pre_commit_hook,
)


def hook_path(root: Path) -> Path:
    return root / ".git" / "hooks" / "pre-commit"


def test_install_creates_executable_hook_with_block(git_project):
    """First install creates the hooks dir, the file and the managed block."""
    result = install_pre_commit_hook(git_project)

    hook = hook_path(git_project)
    assert result.action == "installed"
    assert result.hook_path == hook
    assert hook.stat().st_mode & 0o111

    content = hook.read_text()
    assert content.startswith(BASH_SHEBANG + "\n\n" + HOOK_START_MARKER + "\n")
    assert content.endswith(HOOK_END_MARKER + "\n")
    assert create_git_hook(False) in content
    assert HUSKY_SCRIPT not in content


def test_install_twice_is_idempotent(git_project):
    install_pre_commit_hook(git_project, auto_format_files=True)
    first = hook_path(git_project).read_text()

    result = install_pre_commit_hook(git_project, auto_format_files=True)

    assert result.action == "unchanged"
    assert hook_path(git_project).read_text() == first


def test_toggle_autoformat_only_changes_flag_line(git_project):
    hook_dir = git_project / ".git" / "hooks"
    hook_dir.mkdir()
    hook = hook_dir / "pre-commit"
    hook.write_text("#!/bin/sh\necho before\n")

    install_pre_commit_hook(git_project, auto_format_files=False)
    with open(hook, "a") as f:
        f.write("echo after\n")
    before = hook.read_text().splitlines()

    result = install_pre_commit_hook(git_project, auto_format_files=True)
    after = hook.read_text().splitlines()

    assert result.action == "updated"
    assert len(before) == len(after)
    changed = [(b, a) for b, a in zip(before, after) if b != a]
    assert changed == [("auto_format_files=false", "auto_format_files=true")]
    assert after[:2] == ["#!/bin/sh", "echo before"]
    assert after[-1] == "echo after"


def test_existing_hook_is_not_recreated(git_project):
    """An existing hook keeps its content and mode; the block is appended."""
    hook_dir = git_project / ".git" / "hooks"
    hook_dir.mkdir()
    hook = hook_dir / "pre-commit"
    hook.write_text("#!/bin/sh\nnpm test\n")
    hook.chmod(0o644)

    install_pre_commit_hook(git_project)

    content = hook.read_text()
    assert content.startswith("#!/bin/sh\nnpm test\n\n" + HOOK_START_MARKER)
    assert not hook.stat().st_mode & 0o111


def test_husky_dir_takes_precedence(git_project):
    (git_project / ".husky").mkdir()

    result = install_pre_commit_hook(git_project)

    husky_hook = git_project / ".husky" / "pre-commit"
    assert result.hook_path == husky_hook
    assert not hook_path(git_project).exists()
    assert husky_hook.read_text().startswith(f"{BASH_SHEBANG}\n{HUSKY_SCRIPT}\n\n{HOOK_START_MARKER}")


def test_git_dir_found_two_levels_up(tmp_path):
    (tmp_path / ".git").mkdir()
    root = tmp_path / "apps" / "android"
    root.mkdir(parents=True)

    result = install_pre_commit_hook(root)

    assert result.hook_path == tmp_path / ".git" / "hooks" / "pre-commit"
    assert (tmp_path / ".git" / "hooks").is_dir()
    assert result.hook_path.exists()


def test_no_hook_dir_only_warns(project_root, caplog):
    if any((parent / ".git").exists() for parent in project_root.parents):
        pytest.skip("tmp dir is inside a git checkout")

    with caplog.at_level(logging.WARNING):
        result = install_pre_commit_hook(project_root)

    assert result.action == "skipped"
    assert result.hook_path is None
    assert list(project_root.iterdir()) == []
    assert "No .husky or .git directory found" in caplog.text


def test_hook_file_creation_failure_is_logged(git_project, monkeypatch, caplog):
    def deny(self, *args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "touch", deny)

    with caplog.at_level(logging.WARNING):
        result = install_pre_commit_hook(git_project)

    assert result.action == "skipped"
    assert not hook_path(git_project).exists()
    assert "Could not create hook file" in caplog.text


def test_worktree_uses_common_hooks_dir(tmp_path):
    main_git_dir = tmp_path / "main" / ".git"
    worktree_git_dir = main_git_dir / "worktrees" / "feature"
    worktree_git_dir.mkdir(parents=True)
    (worktree_git_dir / "commondir").write_text("../..\n")
    worktree = tmp_path / "feature"
    worktree.mkdir()
    (worktree / ".git").write_text(f"gitdir: {worktree_git_dir}\n")

    result = install_pre_commit_hook(worktree)

    assert result.hook_path == main_git_dir.resolve() / "hooks" / "pre-commit"
    assert not (worktree_git_dir / "hooks").exists()


def test_submodule_gitdir_keeps_own_hooks(tmp_path):
    module_git_dir = tmp_path / "main" / ".git" / "modules" / "lib"
    module_git_dir.mkdir(parents=True)
    submodule = tmp_path / "main" / "lib"
    submodule.mkdir()
    (submodule / ".git").write_text("gitdir: ../.git/modules/lib\n")

    result = install_pre_commit_hook(submodule)

    assert result.hook_path.resolve() == (module_git_dir / "hooks" / "pre-commit").resolve()


def test_real_worktree_hook_is_where_git_looks(temp_git_repo, tmp_path):
    subprocess.run(
        ["git", "commit", "--allow-empty", "-m", "init"],
        cwd=temp_git_repo, check=True, capture_output=True,
    )
    worktree = tmp_path / "feature"
    subprocess.run(
        ["git", "worktree", "add", str(worktree)],
        cwd=temp_git_repo, check=True, capture_output=True,
    )

    result = install_pre_commit_hook(worktree)

    git_hooks = subprocess.run(
        ["git", "rev-parse", "--git-path", "hooks"],
        cwd=worktree, check=True, capture_output=True, text=True,
    ).stdout.strip()
    assert result.hook_path.parent.resolve() == (worktree / git_hooks).resolve()
    assert result.hook_path.parent.resolve() == (temp_git_repo / ".git" / "hooks").resolve()



@pytest.mark.parametrize("content", [
    f"#!/bin/bash\n{HOOK_END_MARKER}\n{HOOK_START_MARKER}\n",
    f"#!/bin/bash\n{HOOK_START_MARKER}\necho\n",
    f"#!/bin/bash\n{HOOK_START_MARKER}\n{HOOK_END_MARKER}\n{HOOK_START_MARKER}\n{HOOK_END_MARKER}\n",
])
def test_malformed_block_is_rejected(git_project, content):
    hook_dir = git_project / ".git" / "hooks"
    hook_dir.mkdir()
    hook = hook_dir / "pre-commit"
    hook.write_text(content)

    with pytest.raises(MalformedHookBlockError):
        install_pre_commit_hook(git_project)

    assert hook.read_text() == content


def test_remove_restores_original_content(git_project):
    hook_dir = git_project / ".git" / "hooks"
    hook_dir.mkdir()
    hook = hook_dir / "pre-commit"
    hook.write_text("#!/bin/sh\nnpm test\n")

    install_pre_commit_hook(git_project, auto_format_files=True)
    result = remove_pre_commit_hook(git_project)

    assert result.action == "removed"
    assert hook.read_text() == "#!/bin/sh\nnpm test\n"


def test_status_reports_autoformat(git_project):
    status = check_hook_status(git_project)
    assert status["installed"] is False

    install_pre_commit_hook(git_project, auto_format_files=True)
    status = check_hook_status(git_project)

    assert status["installed"] is True
    assert status["managed_block"] is True
    assert status["auto_format_files"] is True
    assert status["executable"] is True


def test_generated_script_toggles_only_flag():
    lint_only = create_git_hook(False)
    with_format = create_git_hook(True)

    assert "auto_format_files=false" in lint_only
    assert "auto_format_files=true" in with_format
    assert lint_only.replace("=false", "=true") == with_format
    assert "./gradlew checkKotlinFiles -Pfiles=\"$staged_files\"" in lint_only
    assert "./gradlew formatKotlinFiles -Pfiles=\"$staged_files\"" in lint_only
    assert "xargs git add" in lint_only


def test_installer_resolves_relative_root(git_project, monkeypatch):
    monkeypatch.chdir(git_project)

    installer = PreCommitHookInstaller(Path("."))

    assert installer.find_hook_dir() == Path(os.getcwd()) / ".git" / "hooks"
