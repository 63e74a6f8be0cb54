"""
KGP - Pre-Commit Hook Installer
Instala e atualiza o bloco gerenciado do hook de pre-commit que roda lint
(e opcionalmente format) nos arquivos Kotlin staged.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ..core.conventions import FORMAT_TASK, LINT_TASK
from ..scanners.git_diff import STAGED_KOTLIN_FILES_EXPRESSION


logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class HookInstallerError(Exception):
    """Exception raised when hook installation fails."""
    pass


class MalformedHookBlockError(HookInstallerError):
    """Hook file has markers out of order, duplicated or unpaired."""
    pass


# =============================================================================
# Constants
# =============================================================================

BASH_SHEBANG = "#!/bin/bash"
GIT_DIR = ".git"
HOOKS_DIR = "hooks"
COMMONDIR_FILE = "commondir"
HUSKY_DIR = ".husky"
HUSKY_SCRIPT = '. "$(dirname "$0")/_/husky.sh"'
PRE_COMMIT_HOOK_FILENAME = "pre-commit"
HOOK_FILE_MODE = 0o755

HOOK_START_MARKER = "### AUTOGENERATED KGP KOTLINTER HOOK START - DO NOT MODIFY ###"
HOOK_END_MARKER = "### AUTOGENERATED KGP KOTLINTER HOOK END ###"

_AUTO_FORMAT_LINE = re.compile(r"^auto_format_files=(true|false)$", re.MULTILINE)


# =============================================================================
# Hook Template
# =============================================================================

def create_git_hook(auto_format_files: bool) -> str:
    """Corpo do bloco gerenciado, gerado inteiramente a partir da flag."""
    flag = "true" if auto_format_files else "false"
    return f"""staged_files={STAGED_KOTLIN_FILES_EXPRESSION}
if [ -z "$staged_files" ]; then
    echo "No Kotlin files are staged."
    exit 0
fi

echo "Running lint on the following staged files:"
echo "$staged_files"

auto_format_files={flag}
if [ "$auto_format_files" = true ]; then
    echo "auto-formatting staged files..."
    ./gradlew {FORMAT_TASK} -Pfiles="$staged_files"
fi

if ! ./gradlew {LINT_TASK} -Pfiles="$staged_files"; then
    echo "pre-commit hook: Some files are either not properly formatted or could not be auto-formatted. Aborting commit."
    exit 1
else
    # Re-index any files that may have been corrected before committing
    echo "$staged_files" | xargs git add
    exit_code=0
fi"""


def find_hook_block(contents: str, source: str = "hook file") -> Optional[Tuple[int, int]]:
    """
    Localiza o bloco gerenciado.

    Returns:
        (índice do marcador de início, índice do marcador de fim), ou None
        se o arquivo não tem nenhum marcador

    Raises:
        MalformedHookBlockError: marcadores duplicados, sem par ou fora de ordem
    """
    starts = contents.count(HOOK_START_MARKER)
    ends = contents.count(HOOK_END_MARKER)

    if starts == 0 and ends == 0:
        return None

    start = contents.find(HOOK_START_MARKER)
    end = contents.find(HOOK_END_MARKER)

    if starts != 1 or ends != 1 or end < start:
        raise MalformedHookBlockError(
            f"{source}: expected one start marker followed by one end marker, "
            f"found {starts} start and {ends} end markers. "
            f"Fix or remove the managed block by hand and run the install again."
        )

    return start, end


# =============================================================================
# Result
# =============================================================================

@dataclass
class InstallResult:
    """Resultado de uma instalação (installed, updated, unchanged, removed, skipped)."""
    action: str
    hook_path: Optional[Path] = None
    auto_format_files: Optional[bool] = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.action != "skipped"


# =============================================================================
# Hook Installer Class
# =============================================================================

class PreCommitHookInstaller:
    """Gerencia o bloco KGP dentro do hook de pre-commit."""

    def __init__(self, root_dir: Path):
        """
        Args:
            root_dir: Diretório raiz do projeto
        """
        self.root_dir = Path(root_dir).absolute()

    # -------------------------------------------------------------------------
    # Hook directory
    # -------------------------------------------------------------------------

    def find_hook_dir(self) -> Optional[Path]:
        """.husky na raiz tem preferência; senão .git/hooks subindo pelos pais."""
        return self._find_husky_dir() or self._find_git_hooks_dir()

    def _find_husky_dir(self) -> Optional[Path]:
        husky_dir = self.root_dir / HUSKY_DIR
        if husky_dir.exists():
            logger.info("Found %s directory: %s", HUSKY_DIR, husky_dir)
            return husky_dir
        return None

    def _find_git_hooks_dir(self) -> Optional[Path]:
        git_dir = self._find_git_dir()
        if git_dir is None:
            return None

        logger.info("Found %s directory: %s", GIT_DIR, git_dir)
        hooks_dir = self._common_dir(git_dir) / HOOKS_DIR
        try:
            hooks_dir.mkdir(exist_ok=True)
        except OSError as e:
            logger.warning("Could not create hooks directory at: %s (%s)", hooks_dir, e)
            return None
        return hooks_dir

    def _find_git_dir(self) -> Optional[Path]:
        """Sobe do root até a raiz do filesystem procurando .git (suporta worktrees)."""
        for directory in [self.root_dir, *self.root_dir.parents]:
            candidate = directory / GIT_DIR

            if candidate.is_dir():
                return candidate

            # Worktree: arquivo .git apontando para o git dir real
            if candidate.is_file():
                real_git_dir = self._read_gitdir_file(candidate)
                if real_git_dir is not None:
                    return real_git_dir

        return None

    def _read_gitdir_file(self, git_file: Path) -> Optional[Path]:
        try:
            content = git_file.read_text().strip()
        except OSError as e:
            logger.warning("Could not read %s (%s)", git_file, e)
            return None

        if not content.startswith("gitdir:"):
            return None

        real_git_dir = Path(content.split(":", 1)[1].strip())
        if not real_git_dir.is_absolute():
            real_git_dir = git_file.parent / real_git_dir
        return real_git_dir if real_git_dir.is_dir() else None

    def _common_dir(self, git_dir: Path) -> Path:
        """
        Worktrees compartilham os hooks do repositório principal: o git dir
        da worktree tem um arquivo ``commondir`` apontando para ele.
        Submódulos não têm ``commondir`` e usam os próprios hooks.
        """
        commondir_file = git_dir / COMMONDIR_FILE
        if not commondir_file.is_file():
            return git_dir

        try:
            common_dir = Path(commondir_file.read_text().strip())
        except OSError as e:
            logger.warning("Could not read %s (%s)", commondir_file, e)
            return git_dir

        if not common_dir.is_absolute():
            common_dir = git_dir / common_dir
        return common_dir.resolve()

    # -------------------------------------------------------------------------
    # Install
    # -------------------------------------------------------------------------

    def install(self, auto_format_files: bool = False) -> InstallResult:
        """
        Garante que o hook existe, é executável e tem o bloco atualizado.

        Falhas de ambiente (sem diretório de hooks, erro ao criar o arquivo)
        são logadas e resultam em action='skipped'.

        Raises:
            MalformedHookBlockError: se o bloco existente estiver corrompido
        """
        hook_dir = self.find_hook_dir()
        if hook_dir is None:
            logger.warning("No .husky or .git directory found. Cannot create git hooks.")
            return InstallResult("skipped", message="No .husky or .git directory found")

        logger.info("Found hook directory: %s", hook_dir)
        hook_file = hook_dir / PRE_COMMIT_HOOK_FILENAME

        if not self.create_hook_file(hook_file):
            return InstallResult("skipped", hook_file, message="Could not create hook file")

        action = self.write_hook(hook_file, auto_format_files)
        return InstallResult(action, hook_file, auto_format_files)

    def create_hook_file(self, hook_file: Path) -> bool:
        """Cria o arquivo executável com shebang, apenas se ainda não existir."""
        if hook_file.exists():
            return True

        logger.info("Creating pre-commit hook file at: %s", hook_file)
        try:
            hook_file.touch(exist_ok=False)
            hook_file.chmod(HOOK_FILE_MODE)

            contents = BASH_SHEBANG + "\n"
            if HUSKY_DIR in hook_file.parent.parts:
                contents += HUSKY_SCRIPT + "\n"
            hook_file.write_text(contents)
        except OSError as e:
            logger.warning("Could not create hook file at: %s (%s)", hook_file, e)
            return False

        return True

    def write_hook(self, hook_file: Path, auto_format_files: bool) -> str:
        """
        Acrescenta ou substitui o bloco gerenciado.

        Returns:
            'installed', 'updated' ou 'unchanged'
        """
        contents = hook_file.read_text()
        body = create_git_hook(auto_format_files)
        block = find_hook_block(contents, str(hook_file))

        if block is None:
            with open(hook_file, "a") as f:
                f.write(f"\n{HOOK_START_MARKER}\n{body}\n{HOOK_END_MARKER}\n")
            logger.info("Installed pre-commit hook block in %s", hook_file)
            return "installed"

        start, end = block
        new_contents = contents[:start] + f"{HOOK_START_MARKER}\n{body}\n" + contents[end:]
        if new_contents == contents:
            return "unchanged"

        hook_file.write_text(new_contents)
        logger.info("Updated pre-commit hook block in %s", hook_file)
        return "updated"

    # -------------------------------------------------------------------------
    # Remove / Status
    # -------------------------------------------------------------------------

    def remove(self) -> InstallResult:
        """Remove o bloco gerenciado, preservando o resto do arquivo."""
        hook_dir = self.find_hook_dir()
        hook_file = hook_dir / PRE_COMMIT_HOOK_FILENAME if hook_dir else None

        if hook_file is None or not hook_file.exists():
            return InstallResult("skipped", hook_file, message="Hook não instalado")

        contents = hook_file.read_text()
        block = find_hook_block(contents, str(hook_file))
        if block is None:
            return InstallResult("skipped", hook_file, message="Hook sem bloco KGP")

        start, end = block
        end += len(HOOK_END_MARKER)
        if contents[end:end + 1] == "\n":
            end += 1
        if contents[:start].endswith("\n\n"):
            start -= 1

        hook_file.write_text(contents[:start] + contents[end:])
        logger.info("Removed pre-commit hook block from %s", hook_file)
        return InstallResult("removed", hook_file)

    def status(self) -> Dict[str, Any]:
        """Retorna status detalhado do hook."""
        hook_dir = self.find_hook_dir()
        status: Dict[str, Any] = {
            "root_dir": str(self.root_dir),
            "hooks_dir": str(hook_dir) if hook_dir else None,
            "hook_file": None,
            "installed": False,
            "executable": False,
            "managed_block": False,
            "auto_format_files": None,
        }

        if hook_dir is None:
            return status

        hook_file = hook_dir / PRE_COMMIT_HOOK_FILENAME
        status["hook_file"] = str(hook_file)
        if not hook_file.exists():
            return status

        status["installed"] = True
        status["executable"] = hook_file.stat().st_mode & 0o111 != 0

        contents = hook_file.read_text()
        try:
            block = find_hook_block(contents, str(hook_file))
        except MalformedHookBlockError as e:
            status["error"] = str(e)
            return status

        if block is not None:
            status["managed_block"] = True
            match = _AUTO_FORMAT_LINE.search(contents, block[0], block[1])
            if match:
                status["auto_format_files"] = match.group(1) == "true"

        return status


# =============================================================================
# Helper Functions
# =============================================================================

def install_pre_commit_hook(root_dir: Path, auto_format_files: bool = False) -> InstallResult:
    """Instala/atualiza o hook de pre-commit do projeto em root_dir."""
    return PreCommitHookInstaller(root_dir).install(auto_format_files)


def remove_pre_commit_hook(root_dir: Path) -> InstallResult:
    """Remove o bloco KGP do hook de pre-commit."""
    return PreCommitHookInstaller(root_dir).remove()


def check_hook_status(root_dir: Path) -> Dict[str, Any]:
    """Verifica status do hook."""
    return PreCommitHookInstaller(root_dir).status()


def print_install_result(result: InstallResult):
    """Printa resultado da instalação (helper para CLI)."""
    from rich.console import Console

    console = Console()
    messages = {
        "installed": ("✅", "Hook instalado", "green"),
        "updated": ("✅", "Hook atualizado", "green"),
        "unchanged": ("✅", "Hook já está atualizado", "green"),
        "removed": ("🗑️ ", "Bloco KGP removido", "green"),
        "skipped": ("⚠️ ", result.message or "Nada feito", "yellow"),
    }
    icon, message, style = messages.get(result.action, ("❔", result.action, "white"))

    console.print(f"{icon} {message}", style=style)
    if result.hook_path:
        console.print(f"   {result.hook_path}")
    if result.auto_format_files is not None:
        mode = "lint + auto-format" if result.auto_format_files else "lint"
        console.print(f"   modo: {mode}")


def print_status(status: Dict[str, Any]):
    """Printa status do hook (helper para CLI)."""
    from rich.console import Console
    from rich.table import Table

    console = Console()

    console.print(f"\n📁 Projeto: {status['root_dir']}")
    console.print(f"📂 Hooks dir: {status['hooks_dir'] or '-'}\n")

    table = Table(title="Status do Hook")
    table.add_column("Hook", style="cyan")
    table.add_column("Instalado", style="yellow")
    table.add_column("KGP", style="green")
    table.add_column("Executável", style="magenta")
    table.add_column("Auto-format", style="blue")

    auto_format = status.get("auto_format_files")
    table.add_row(
        PRE_COMMIT_HOOK_FILENAME,
        "✅" if status.get("installed") else "❌",
        "✅" if status.get("managed_block") else "❌",
        "✅" if status.get("executable") else "❌",
        "-" if auto_format is None else ("✅" if auto_format else "❌"),
    )

    console.print(table)
    if status.get("error"):
        console.print(f"❌ {status['error']}", style="red")
