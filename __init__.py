"""
KGP - Kotlin/Gradle Project Conventions

Resolve as propriedades ``kgp.*`` de um build Gradle em uma configuração
tipada e instala o hook de pre-commit que roda lint (e opcionalmente
format) nos arquivos Kotlin staged.
"""

from .__version__ import __version__

__all__ = ["__version__"]
