"""
KGP - Root Conventions
Decide quais plugins, tasks e coordenadas de publicação as convenções de
root aplicam para uma configuração resolvida.
"""

import logging
import os
import re
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .models import ConventionPlan, KgpConfig, ProjectLayout, PublishingRepository
from .resolver import load_properties_file


logger = logging.getLogger(__name__)

MIN_SUPPORTED_GRADLE_VERSION = "8.4"
BUILD_VERSION_ENV = "BUILD_VERSION"
DEFAULT_BUILD_VERSION = "0.0.1"
GROUP_PREFIX = "com.kroger"

WRAPPER_PROPERTIES = Path("gradle") / "wrapper" / "gradle-wrapper.properties"
_DISTRIBUTION_VERSION = re.compile(r"gradle-(\d+(?:\.\d+)*)(?:-[\w.]+)?-(?:bin|all)\.zip")

# Plugins aplicados pelas convenções de root
DEPENDENCY_MANAGEMENT_PLUGIN = "com.autonomousapps.dependency-analysis"
DOKKA_PLUGIN = "org.jetbrains.dokka"
KOTLINTER_PLUGIN = "org.jmailen.kotlinter"

# Tasks registradas
CLEAN_TASK = "clean"
DOKKA_TASK = "dokkaHtml"
LINT_TASK = "checkKotlinFiles"
FORMAT_TASK = "formatKotlinFiles"
LINT_HOOK_TASK = "createLintKotlinPreCommitHook"
FORMAT_HOOK_TASK = "createFormatKotlinPreCommitHook"


class PreconditionError(Exception):
    """Convenções aplicadas em um contexto não suportado."""
    pass


# =============================================================================
# Gradle Version
# =============================================================================

def parse_version(version: str) -> Tuple[int, ...]:
    """'8.4' -> (8, 4); sufixos como '-rc-1' são ignorados."""
    numeric = re.match(r"\d+(?:\.\d+)*", version.strip())
    if not numeric:
        raise ValueError(f"Versão inválida: {version}")
    return tuple(int(part) for part in numeric.group(0).split("."))


def is_supported_gradle(version: str) -> bool:
    current = parse_version(version)
    minimum = parse_version(MIN_SUPPORTED_GRADLE_VERSION)
    width = max(len(current), len(minimum))
    return current + (0,) * (width - len(current)) >= minimum + (0,) * (width - len(minimum))


def read_gradle_version(root_dir: Path) -> Optional[str]:
    """Extrai a versão do Gradle do distributionUrl do wrapper."""
    props = load_properties_file(Path(root_dir) / WRAPPER_PROPERTIES)
    url = props.get("distributionUrl")
    if not url:
        return None

    match = _DISTRIBUTION_VERSION.search(url)
    return match.group(1) if match else None


# =============================================================================
# Publishing
# =============================================================================

def resolve_publishing_repository(
    config: KgpConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[PublishingRepository]:
    """Repositório padrão de publicação; None quando não há url configurada."""
    url = config.repository_url
    if url is None or not url.strip():
        return None

    environ = os.environ if environ is None else environ
    logger.info("Using kgp.repository.url setting: %s", url)
    return PublishingRepository(
        name=config.repository_name,
        url=url.strip(),
        username=environ.get(config.repository_username_env),
        password=environ.get(config.repository_password_env),
    )


# =============================================================================
# Root Conventions
# =============================================================================

def plan_root_conventions(
    layout: ProjectLayout,
    config: KgpConfig,
    gradle_version: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ConventionPlan:
    """
    Monta o plano das convenções de root.

    Args:
        layout: Projeto onde as convenções são aplicadas
        config: Configuração resolvida
        gradle_version: Versão do Gradle (None = não verificada)
        environ: Ambiente (default: os.environ)

    Returns:
        ConventionPlan

    Raises:
        PreconditionError: projeto não é o root ou Gradle abaixo do mínimo
    """
    if not layout.is_root:
        raise PreconditionError(
            "The root conventions should only be applied once and on the root project."
        )

    if gradle_version is None:
        logger.info("Gradle version unknown, skipping minimum version check")
    elif not is_supported_gradle(gradle_version):
        raise PreconditionError(
            f"KGP conventions require Gradle {MIN_SUPPORTED_GRADLE_VERSION} or later. "
            f"Found {gradle_version}"
        )

    environ = os.environ if environ is None else environ
    plan = ConventionPlan(config=config, gradle_version=gradle_version)

    if config.auto_apply_dependency_management:
        plan.plugins.append(DEPENDENCY_MANAGEMENT_PLUGIN)

    if config.auto_apply_kotlinter:
        plan.plugins.append(KOTLINTER_PLUGIN)
        plan.tasks.extend([LINT_TASK, FORMAT_TASK, LINT_HOOK_TASK, FORMAT_HOOK_TASK])

    if config.auto_apply_dokka:
        plan.plugins.append(DOKKA_PLUGIN)
        plan.tasks.append(DOKKA_TASK)

    plan.tasks.append(CLEAN_TASK)

    if config.auto_configure_publishing_properties:
        plan.group = f"{GROUP_PREFIX}.{layout.root_name}"
        plan.version = environ.get(BUILD_VERSION_ENV) or DEFAULT_BUILD_VERSION

    plan.repository = resolve_publishing_repository(config, environ)
    return plan


__all__ = [
    'PreconditionError',
    'MIN_SUPPORTED_GRADLE_VERSION',
    'parse_version',
    'is_supported_gradle',
    'read_gradle_version',
    'resolve_publishing_repository',
    'plan_root_conventions',
]
