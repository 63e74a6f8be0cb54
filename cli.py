"""
KGP - Command Line Interface
Entry point principal para todos os comandos do KGP.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from kgp.__version__ import __version__
from kgp.core.conventions import PreconditionError, plan_root_conventions, read_gradle_version
from kgp.core.formatters import FormatterFactory
from kgp.core.models import ProjectLayout
from kgp.core.properties_loader import (
    PropertiesLoadError,
    PropertyValidationError,
    load_default_properties,
    load_properties,
)
from kgp.core.resolver import (
    PropertyResolver,
    PropertySource,
    build_config,
)
from kgp.hooks.install import (
    HookInstallerError,
    check_hook_status,
    install_pre_commit_hook,
    print_install_result,
    print_status,
    remove_pre_commit_hook,
)
from kgp.log import configure_logging
from kgp.scanners.git_diff import (
    GitError,
    NotGitRepositoryError,
    get_staged_files,
    get_staged_kotlin_files,
)


# =============================================================================
# Typer App Setup
# =============================================================================

app = typer.Typer(
    name="kgp",
    help="KGP - Kotlin/Gradle project conventions",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()


# =============================================================================
# Global Options
# =============================================================================

def version_callback(value: bool):
    """Callback para --version."""
    if value:
        console.print(f"KGP version {__version__}", style="bold cyan")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Mostra versão do KGP"
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Nível de log: DEBUG, INFO, WARNING, ERROR"
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Grava logs em arquivo em vez do stderr"
    ),
):
    """
    KGP - Kotlin/Gradle project conventions

    Resolve propriedades kgp.* e instala o hook de pre-commit do Kotlinter.
    """
    configure_logging(level=log_level, log_file=log_file)


def parse_overrides(values: Optional[List[str]]) -> Dict[str, str]:
    """['a=b', 'c=d'] -> {'a': 'b', 'c': 'd'}."""
    overrides: Dict[str, str] = {}
    for item in values or []:
        if "=" not in item:
            raise typer.BadParameter(f"Esperado key=value: {item}", param_hint="-P")
        key, value = item.split("=", 1)
        overrides[key.strip()] = value
    return overrides


# =============================================================================
# Command: install-hook
# =============================================================================

@app.command("install-hook")
def install_hook(
    auto_format: bool = typer.Option(
        False,
        "--format/--lint-only",
        help="Auto-formata os arquivos staged antes do lint"
    ),
    root: Path = typer.Option(
        Path("."),
        "--root",
        help="Diretório raiz do projeto"
    ),
):
    """
    🪝 Instala/atualiza o hook de pre-commit

    Exemplos:

    \b
    # Apenas lint (createLintKotlinPreCommitHook)
    kgp install-hook

    \b
    # Lint + auto-format (createFormatKotlinPreCommitHook)
    kgp install-hook --format
    """
    try:
        result = install_pre_commit_hook(root, auto_format_files=auto_format)
    except HookInstallerError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1)

    print_install_result(result)


# =============================================================================
# Command: uninstall-hook
# =============================================================================

@app.command("uninstall-hook")
def uninstall_hook(
    root: Path = typer.Option(
        Path("."),
        "--root",
        help="Diretório raiz do projeto"
    ),
):
    """
    🗑️ Remove o bloco KGP do hook de pre-commit
    """
    try:
        result = remove_pre_commit_hook(root)
    except HookInstallerError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1)

    print_install_result(result)


# =============================================================================
# Command: status
# =============================================================================

@app.command()
def status(
    root: Path = typer.Option(
        Path("."),
        "--root",
        help="Diretório raiz do projeto"
    ),
):
    """
    📊 Mostra status do hook de pre-commit
    """
    status_info = check_hook_status(root)
    print_status(status_info)
    if status_info.get("error"):
        raise typer.Exit(1)


# =============================================================================
# Command: staged
# =============================================================================

@app.command()
def staged(
    root: Path = typer.Option(
        Path("."),
        "--root",
        help="Diretório do repositório"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Mostra o status de cada arquivo e a origem dos renames"
    ),
):
    """
    📄 Lista os arquivos Kotlin staged que o hook vai checar
    """
    try:
        if verbose:
            files = [f for f in get_staged_files(root) if f.checked_by_hook]
        else:
            files = get_staged_kotlin_files(root)
    except NotGitRepositoryError:
        console.print("❌ Não é um repositório Git", style="red")
        raise typer.Exit(1)
    except GitError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1)

    if not files:
        console.print("No Kotlin files are staged.")
        return

    for entry in files:
        if not verbose:
            console.print(entry, highlight=False)
        elif entry.old_path:
            console.print(f"{entry.status.value}  {entry.old_path} -> {entry.path}", highlight=False)
        else:
            console.print(f"{entry.status.value}  {entry.path}", highlight=False)


# =============================================================================
# Command: plan
# =============================================================================

@app.command()
def plan(
    root: Path = typer.Option(
        Path("."),
        "--root",
        help="Diretório do root project"
    ),
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        help="Diretório do projeto onde as convenções são aplicadas (default: root)"
    ),
    prop: Optional[List[str]] = typer.Option(
        None,
        "-P",
        help="Sobrescreve uma propriedade (key=value)"
    ),
    gradle_version: Optional[str] = typer.Option(
        None,
        "--gradle-version",
        help="Versão do Gradle (default: lida do wrapper)"
    ),
    format: str = typer.Option(
        "console",
        "--format",
        "-f",
        help="Formato de output: console, json"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Mostra todos os valores de configuração"
    ),
):
    """
    🧭 Mostra o que as convenções de root aplicam

    Exemplos:

    \b
    kgp plan
    kgp plan -P kgp.plugins.autoapply.dokka=false --format json
    """
    project_dir = project or root
    try:
        formatter = FormatterFactory.create(format_type=format, verbose=verbose)
        config = _resolve(project_dir, root, parse_overrides(prop))
        result = plan_root_conventions(
            ProjectLayout(root_dir=root, project_dir=project_dir),
            config,
            gradle_version or read_gradle_version(root),
        )
    except (ValueError, PreconditionError, PropertiesLoadError, PropertyValidationError) as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1)

    typer.echo(formatter.format_plan(result))


def _resolve(project_dir: Path, root_dir: Path, overrides: Dict[str, str]):
    catalog = load_default_properties()
    source = PropertySource.for_project(project_dir, root_dir, overrides)
    return build_config(PropertyResolver(source), catalog)


# =============================================================================
# Command Group: config
# =============================================================================

config_app = typer.Typer(help="⚙️ Propriedades kgp.*")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show(
    root: Path = typer.Option(
        Path("."),
        "--root",
        help="Diretório do root project"
    ),
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        help="Diretório do projeto (default: root)"
    ),
    prop: Optional[List[str]] = typer.Option(
        None,
        "-P",
        help="Sobrescreve uma propriedade (key=value)"
    ),
):
    """
    📋 Mostra a configuração resolvida

    Exemplo:

    \b
    kgp config show -P kgp.android.autoconfigure.compose.dependencies=material3
    """
    try:
        catalog = load_default_properties()
        config = _resolve(project or root, root, parse_overrides(prop))
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1)

    table = Table(show_header=True, title="KGP Configuration")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="yellow")
    table.add_column("Default", style="dim")

    for spec in catalog.properties:
        value = getattr(config, spec.field_name)
        table.add_row(spec.key, _display(value), spec.default_display)

    console.print(table)


def _display(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name.lower()
    return str(value)


@config_app.command("list")
def config_list(
    properties_file: Optional[Path] = typer.Option(
        None,
        "--properties",
        help="Catálogo de propriedades customizado"
    ),
):
    """
    📋 Lista as propriedades reconhecidas
    """
    try:
        catalog = load_properties(properties_file) if properties_file else load_default_properties()
    except (PropertiesLoadError, PropertyValidationError) as e:
        console.print(f"❌ Erro ao carregar propriedades: {e}", style="red")
        raise typer.Exit(1)

    console.print(f"\n📦 {len(catalog.properties)} propriedades\n")

    table = Table(show_header=True, title="KGP Properties")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Type", style="magenta")
    table.add_column("Default", style="yellow")

    for spec in catalog.properties:
        table.add_row(spec.key, spec.type.value, spec.default_display)

    console.print(table)


@config_app.command("explain")
def config_explain(
    key: str = typer.Argument(
        ...,
        help="Chave da propriedade"
    ),
):
    """
    📖 Explica uma propriedade

    Exemplo:

    \b
    kgp config explain kgp.plugins.autoapply.kotlinter
    """
    catalog = load_default_properties()
    spec = catalog.get(key)

    if not spec:
        console.print(f"❌ Propriedade não encontrada: {key}", style="red")
        raise typer.Exit(1)

    console.print(f"\n📋 {spec.key}\n", style="bold cyan")

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold yellow")
    table.add_column("Value")

    table.add_row("Type", spec.type.value)
    table.add_row("Default", spec.default_display)
    if spec.enum_type is not None:
        table.add_row("Values", ", ".join(m.name.lower() for m in spec.enum_type))
    table.add_row("Description", spec.description)

    console.print(table)
    console.print()


# =============================================================================
# Main Entry Point
# =============================================================================

def main():
    """Entry point principal."""
    app()


if __name__ == "__main__":
    main()
