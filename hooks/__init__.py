"""Git pre-commit hook installation and management."""

from .install import (
    PreCommitHookInstaller,
    check_hook_status,
    install_pre_commit_hook,
    remove_pre_commit_hook,
)

__all__ = [
    "PreCommitHookInstaller",
    "check_hook_status",
    "install_pre_commit_hook",
    "remove_pre_commit_hook",
]
