"""
KGP - Git Diff Scanner
Lista arquivos staged e aplica o filtro de arquivos Kotlin usado pelo hook.
"""

import re
import subprocess
from enum import Enum
from pathlib import Path
from typing import List, Optional


# =============================================================================
# Exceções
# =============================================================================

class GitError(Exception):
    """Erro ao executar comando git."""
    pass


class NotGitRepositoryError(GitError):
    """Diretório não é um repositório git."""
    pass


# =============================================================================
# Comandos
# =============================================================================

# --no-pager: não manda o output para um pager
# --name-status: apenas status (A, M, D, R...) e nome do arquivo
# --no-color: sem códigos de cor
# --staged: apenas mudanças staged
#
# A       app/Application.kt
# M       app/build.gradle.kts
# D       app-feature/AppFeatureClass.kt
# R100    old/Name.kt     new/Name.kt
GIT_STAGED_COMMAND = ["git", "--no-pager", "diff", "--name-status", "--no-color", "--staged"]

# $1 != "D": ignora arquivos deletados
# $NF ~ /\.kts?$/: o último campo é o nome do arquivo (em renames é o terceiro campo)
# { print $NF }: imprime só o path
AWK_KOTLIN_FILTER = """awk '$1 != "D" && $NF ~ /\\.kts?$/ { print $NF }'"""

STAGED_KOTLIN_FILES_EXPRESSION = f'"$({" ".join(GIT_STAGED_COMMAND)} | {AWK_KOTLIN_FILTER})"'

KOTLIN_FILE = re.compile(r"\.kts?$")


# =============================================================================
# Enums / Data Classes
# =============================================================================

class FileStatus(str, Enum):
    """Status de arquivo no git."""
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    TYPE_CHANGED = "T"
    UNMERGED = "U"


class GitFile:
    """Representa um arquivo no git diff."""

    def __init__(self, path: str, status: FileStatus, old_path: Optional[str] = None):
        self.path = path
        self.status = status
        self.old_path = old_path  # Para renamed files

    @property
    def is_kotlin(self) -> bool:
        return bool(KOTLIN_FILE.search(self.path))

    @property
    def checked_by_hook(self) -> bool:
        """Mesmo critério do filtro awk: não deletado e .kt/.kts."""
        return self.status != FileStatus.DELETED and self.is_kotlin

    def __repr__(self):
        if self.old_path:
            return f"GitFile('{self.old_path}' → '{self.path}', {self.status.value})"
        return f"GitFile('{self.path}', {self.status.value})"


# =============================================================================
# Filtro
# =============================================================================

def filter_kotlin_files(name_status_output: str) -> List[str]:
    """
    Mesmo filtro do awk do hook: status diferente de D, último campo
    terminando em .kt/.kts, imprime o último campo.

    Args:
        name_status_output: Output de 'git diff --name-status'

    Returns:
        Paths na ordem do input
    """
    paths = []
    for line in name_status_output.splitlines():
        fields = line.split()
        if not fields:
            continue
        if fields[0] != FileStatus.DELETED.value and KOTLIN_FILE.search(fields[-1]):
            paths.append(fields[-1])
    return paths


# =============================================================================
# Git Diff Scanner
# =============================================================================

class GitDiffScanner:
    """
    Scanner de arquivos staged do Git.

    Responsabilidades:
    - Executar comandos git
    - Parsear output de git diff --name-status
    """

    def __init__(self, repo_path: Optional[Path] = None):
        """
        Args:
            repo_path: Caminho do repositório git (default: diretório atual)
        """
        self.repo_path = repo_path or Path.cwd()

        if not self._is_git_repository():
            raise NotGitRepositoryError(
                f"Diretório não é um repositório git: {self.repo_path}"
            )

    def get_staged_output(self) -> str:
        """Output bruto de GIT_STAGED_COMMAND."""
        return self._run_git_command(GIT_STAGED_COMMAND)

    def get_staged_files(self) -> List[GitFile]:
        """Lista arquivos staged (preparados para commit)."""
        return self._parse_name_status(self.get_staged_output())

    def get_staged_kotlin_files(self) -> List[str]:
        """Paths Kotlin staged que o hook passaria para o lint."""
        return filter_kotlin_files(self.get_staged_output())

    # =========================================================================
    # Helpers Privados
    # =========================================================================

    def _is_git_repository(self) -> bool:
        """Verifica se o diretório é um repositório git."""
        try:
            self._run_git_command(['git', 'rev-parse', '--git-dir'])
            return True
        except GitError:
            return False

    def _run_git_command(self, cmd: List[str], check: bool = True) -> str:
        """
        Executa comando git e retorna output.

        Raises:
            GitError: Se comando falhar e check=True
        """
        try:
            result = subprocess.run(
                cmd,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            raise GitError("Git não encontrado no PATH")
        except OSError as e:
            raise GitError(f"Erro ao executar git: {e}")

        if check and result.returncode != 0:
            raise GitError(
                f"Comando git falhou: {' '.join(cmd)}\n"
                f"Stderr: {result.stderr}"
            )

        return result.stdout

    def _parse_name_status(self, output: str) -> List[GitFile]:
        """
        Parseia output de 'git diff --name-status'.

        Formato:
        A       novo_arquivo.kt
        M       arquivo_modificado.kt
        D       arquivo_deletado.kt
        R100    old_name.kt    new_name.kt
        """
        files = []

        for line in output.strip().split('\n'):
            if not line:
                continue

            parts = line.split('\t')
            if len(parts) < 2:
                continue

            # Status pode ter similarity score: R100, C75, etc
            try:
                status = FileStatus(parts[0][0])
            except ValueError:
                continue

            if status in [FileStatus.RENAMED, FileStatus.COPIED]:
                if len(parts) >= 3:
                    files.append(GitFile(parts[2], status, parts[1]))
            else:
                files.append(GitFile(parts[1], status))

        return files


# =============================================================================
# Helper Functions
# =============================================================================

def get_staged_files(repo_path: Optional[Path] = None) -> List[GitFile]:
    """Helper function para obter lista de arquivos staged."""
    return GitDiffScanner(repo_path).get_staged_files()


def get_staged_kotlin_files(repo_path: Optional[Path] = None) -> List[str]:
    """Helper function para obter os arquivos Kotlin staged."""
    return GitDiffScanner(repo_path).get_staged_kotlin_files()


__all__ = [
    # Classes
    'GitDiffScanner',
    'GitFile',
    'FileStatus',

    # Exceptions
    'GitError',
    'NotGitRepositoryError',

    # Filter
    'GIT_STAGED_COMMAND',
    'AWK_KOTLIN_FILTER',
    'STAGED_KOTLIN_FILES_EXPRESSION',
    'filter_kotlin_files',

    # Helper functions
    'get_staged_files',
    'get_staged_kotlin_files',
]
