"""
KGP - Output Formatters
Formatação do plano de convenções para diferentes contextos (terminal, JSON).
"""

import sys
import json
from typing import Optional, TextIO

from .models import ConventionPlan


# =============================================================================
# ANSI Color Codes
# =============================================================================

class Colors:
    """Códigos de cor ANSI para terminal."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"

    @staticmethod
    def is_tty(file: TextIO = sys.stdout) -> bool:
        """Verifica se o output é um terminal (suporta cores)."""
        return hasattr(file, 'isatty') and file.isatty()


# =============================================================================
# Base Formatter
# =============================================================================

class BaseFormatter:
    """
    Classe base para formatters.
    """

    def __init__(self, use_colors: Optional[bool] = None):
        """
        Args:
            use_colors: Se True, usa cores ANSI. Se None, detecta automaticamente.
        """
        if use_colors is None:
            self.use_colors = Colors.is_tty()
        else:
            self.use_colors = use_colors

    def colorize(self, text: str, color: str) -> str:
        """Aplica cor ao texto se use_colors=True."""
        if not self.use_colors:
            return text
        return f"{color}{text}{Colors.RESET}"

    def format_plan(self, plan: ConventionPlan) -> str:
        """Formata ConventionPlan (deve ser implementado por subclasses)."""
        raise NotImplementedError


# =============================================================================
# Console Formatter (Default)
# =============================================================================

class ConsoleFormatter(BaseFormatter):
    """
    Formatter para output no terminal (human-readable).
    """

    def __init__(self, use_colors: Optional[bool] = None, verbose: bool = False):
        """
        Args:
            use_colors: Usar cores ANSI
            verbose: Se True, lista também todos os valores de configuração
        """
        super().__init__(use_colors)
        self.verbose = verbose

    def format_plan(self, plan: ConventionPlan) -> str:
        lines = [""]
        lines.append(self.colorize("KGP root conventions", Colors.BOLD + Colors.CYAN))
        lines.append(self.colorize(f"Gradle: {plan.gradle_version or 'unknown'}", Colors.GRAY))
        lines.append("")

        lines.append(self.colorize("Plugins", Colors.BOLD))
        if plan.plugins:
            lines.extend(f"  + {plugin}" for plugin in plan.plugins)
        else:
            lines.append(self.colorize("  (none)", Colors.DIM))
        lines.append("")

        lines.append(self.colorize("Tasks", Colors.BOLD))
        lines.extend(f"  - {task}" for task in plan.tasks)
        lines.append("")

        lines.append(self.colorize("Publishing", Colors.BOLD))
        if plan.group:
            lines.append(f"  group:   {plan.group}")
            lines.append(f"  version: {plan.version}")
        else:
            lines.append(self.colorize("  group/version not configured", Colors.DIM))

        if plan.repository:
            repo = plan.repository
            lines.append(f"  repository: {repo.name} ({repo.url})")
            if not repo.username or not repo.password:
                lines.append(self.colorize(
                    f"  missing credentials: {plan.config.repository_username_env} / "
                    f"{plan.config.repository_password_env}",
                    Colors.RED,
                ))

        if self.verbose:
            lines.append("")
            lines.append(self.colorize("Configuration", Colors.BOLD))
            for name, value in plan.config.to_dict().items():
                lines.append(f"  {name} = {value}")

        lines.append("")
        return "\n".join(lines)


# =============================================================================
# JSON Formatter
# =============================================================================

class JSONFormatter(BaseFormatter):
    """
    Formatter para output JSON (CI/CD, ferramentas).
    """

    def __init__(self, pretty: bool = True):
        super().__init__(use_colors=False)
        self.pretty = pretty

    def format_plan(self, plan: ConventionPlan) -> str:
        indent = 2 if self.pretty else None
        return json.dumps(plan.to_dict(), indent=indent, ensure_ascii=False)


# =============================================================================
# Formatter Factory
# =============================================================================

class FormatterFactory:
    """Factory para criar formatters."""

    @staticmethod
    def create(
        format_type: str,
        use_colors: Optional[bool] = None,
        verbose: bool = False,
        pretty: bool = True
    ) -> BaseFormatter:
        """
        Cria formatter apropriado.

        Args:
            format_type: Tipo do formatter (console, json)
            use_colors: Usar cores (apenas console)
            verbose: Modo verbose (apenas console)
            pretty: Pretty print JSON (apenas json)
        """
        format_type = format_type.lower()

        if format_type == "console":
            return ConsoleFormatter(use_colors=use_colors, verbose=verbose)

        elif format_type == "json":
            return JSONFormatter(pretty=pretty)

        else:
            raise ValueError(
                f"Formato desconhecido: {format_type}. "
                f"Formatos válidos: console, json"
            )


__all__ = [
    'BaseFormatter',
    'ConsoleFormatter',
    'JSONFormatter',
    'FormatterFactory',
    'Colors',
]
