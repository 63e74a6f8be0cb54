"""Pytest configuration and fixtures."""

import logging

import pytest
from pathlib import Path


@pytest.fixture(autouse=True)
def reset_kgp_logger():
    """configure_logging (CLI) desliga a propagação; caplog precisa dela."""
    yield
    logger = logging.getLogger("kgp")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def project_root(tmp_path):
    """Diretório de projeto vazio (sem .git nem .husky)."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def git_project(project_root):
    """Projeto com um diretório .git (sem hooks/)."""
    (project_root / ".git").mkdir()
    return project_root


@pytest.fixture
def write_properties():
    """Escreve um gradle.properties em um diretório."""
    def _write(directory: Path, entries: dict) -> Path:
        path = directory / "gradle.properties"
        path.write_text("".join(f"{key}={value}\n" for key, value in entries.items()))
        return path
    return _write


@pytest.fixture
def temp_git_repo(tmp_path):
    """Cria repositório git temporário."""
    import shutil
    import subprocess

    if shutil.which("git") is None:
        pytest.skip("git não disponível")

    repo_dir = tmp_path / "test_repo"
    repo_dir.mkdir()

    subprocess.run(["git", "init"], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "config", "user.email", "test@example.com"],
        cwd=repo_dir,
        check=True
    )
    subprocess.run(
        ["git", "config", "user.name", "Test User"],
        cwd=repo_dir,
        check=True
    )

    return repo_dir
