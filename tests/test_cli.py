"""Tests for the kgp command line."""

import json
import subprocess

import pytest
from typer.testing import CliRunner

from kgp.cli import app
from kgp.hooks.install import HOOK_START_MARKER

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "KGP version" in result.output


def test_install_hook_with_format(git_project):
    result = runner.invoke(app, ["install-hook", "--format", "--root", str(git_project)])

    assert result.exit_code == 0
    content = (git_project / ".git" / "hooks" / "pre-commit").read_text()
    assert HOOK_START_MARKER in content
    assert "auto_format_files=true" in content


def test_install_hook_without_git_dir_is_not_an_error(project_root):
    if any((parent / ".git").exists() for parent in project_root.parents):
        pytest.skip("tmp dir is inside a git checkout")

    result = runner.invoke(app, ["install-hook", "--root", str(project_root)])

    assert result.exit_code == 0


def test_install_hook_malformed_block_fails(git_project):
    hooks = git_project / ".git" / "hooks"
    hooks.mkdir()
    (hooks / "pre-commit").write_text(f"#!/bin/bash\n{HOOK_START_MARKER}\n")

    result = runner.invoke(app, ["install-hook", "--root", str(git_project)])

    assert result.exit_code == 1


def test_uninstall_hook(git_project):
    runner.invoke(app, ["install-hook", "--root", str(git_project)])

    result = runner.invoke(app, ["uninstall-hook", "--root", str(git_project)])

    assert result.exit_code == 0
    content = (git_project / ".git" / "hooks" / "pre-commit").read_text()
    assert HOOK_START_MARKER not in content


def test_plan_json_with_override(project_root):
    result = runner.invoke(app, [
        "plan",
        "--root", str(project_root),
        "--gradle-version", "8.6",
        "-P", "kgp.plugins.autoapply.dokka=false",
        "--format", "json",
    ])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert "org.jetbrains.dokka" not in data["plugins"]
    assert data["config"]["auto_apply_dokka"] is False


def test_plan_invalid_compose_value(project_root):
    (project_root / "gradle.properties").write_text(
        "kgp.android.autoconfigure.compose.dependencies=invalid\n"
    )

    result = runner.invoke(app, ["plan", "--root", str(project_root), "--gradle-version", "8.6"])

    assert result.exit_code == 1
    assert "invalid" in result.output
    assert "material3" in result.output


def test_plan_old_gradle(project_root):
    result = runner.invoke(app, ["plan", "--root", str(project_root), "--gradle-version", "8.1"])

    assert result.exit_code == 1
    assert "8.4" in result.output


def test_config_show(project_root):
    result = runner.invoke(app, [
        "config", "show",
        "--root", str(project_root),
        "-P", "kgp.repository.name=Nexus",
    ])

    assert result.exit_code == 0
    assert "Nexus" in result.output


def test_config_show_unknown_key(project_root):
    result = runner.invoke(app, [
        "config", "show",
        "--root", str(project_root),
        "-P", "kgp.plugins.autoapply.typo=true",
    ])

    assert result.exit_code == 1
    assert "kgp.plugins.autoapply.typo" in result.output


def test_config_explain():
    result = runner.invoke(app, ["config", "explain", "kgp.android.autoconfigure.compose.dependencies"])

    assert result.exit_code == 0
    assert "material3" in result.output


def test_config_explain_unknown():
    result = runner.invoke(app, ["config", "explain", "kgp.nope"])

    assert result.exit_code == 1


def test_config_show_renders_enum_by_name(project_root):
    result = runner.invoke(app, [
        "config", "show",
        "--root", str(project_root),
        "-P", "kgp.android.autoconfigure.compose.dependencies=MATERIAL3",
    ])

    assert result.exit_code == 0
    assert "material3" in result.output
    assert "ComposeDependencies" not in result.output


def test_staged_verbose_shows_rename_source(temp_git_repo):
    (temp_git_repo / "Old.kt").write_text("class Old {\n    fun name() = \"kgp\"\n}\n")
    (temp_git_repo / "Gone.kt").write_text("class Gone\n")
    subprocess.run(["git", "add", "."], cwd=temp_git_repo, check=True)
    subprocess.run(["git", "commit", "-m", "init"], cwd=temp_git_repo, check=True, capture_output=True)
    subprocess.run(["git", "mv", "Old.kt", "New.kt"], cwd=temp_git_repo, check=True)
    subprocess.run(["git", "rm", "-q", "Gone.kt"], cwd=temp_git_repo, check=True)

    result = runner.invoke(app, ["staged", "--verbose", "--root", str(temp_git_repo)])

    assert result.exit_code == 0
    assert "R  Old.kt -> New.kt" in result.output
    assert "Gone.kt" not in result.output


def test_staged_not_a_git_repository(project_root):
    if any((parent / ".git").exists() for parent in project_root.parents):
        pytest.skip("tmp dir is inside a git checkout")

    result = runner.invoke(app, ["staged", "--root", str(project_root)])

    assert result.exit_code == 1
