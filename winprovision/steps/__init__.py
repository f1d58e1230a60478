# SPDX-License-Identifier: LGPL-3.0-or-later
# winprovision/steps/__init__.py
"""
Task-sequence steps run by the orchestrator:
- branding: default-user wallpaper and touch keyboard
- installers: silent MSI/EXE installation
- settings: browser/Copilot/OneDrive placeholder
"""

from .branding import apply_branding
from .installers import InstallerPackage, install_package, install_packages
from .settings import configure_settings

__all__ = [
    "apply_branding",
    "InstallerPackage",
    "install_package",
    "install_packages",
    "configure_settings",
]
