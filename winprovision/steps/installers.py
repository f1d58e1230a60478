# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/steps/installers.py
"""
Silent package installation.

MSI packages run through `msiexec /i <file> /qn /norestart`; anything else is
started directly with its own silent switches. Exit codes 3010 and 1641 mean
"installed, reboot required/initiated" and count as success.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.process import ProcessRunner

MSIEXEC = "msiexec"
MSI_SILENT_ARGS: Tuple[str, ...] = ("/qn", "/norestart")

SUCCESS = 0
REBOOT_REQUIRED = (3010, 1641)


@dataclass(frozen=True)
class InstallerPackage:
    name: str
    path: Path
    args: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_msi(self) -> bool:
        return self.path.suffix.lower() == ".msi"

    def command(self) -> Tuple[str, List[str]]:
        if self.is_msi:
            return MSIEXEC, ["/i", str(self.path), *MSI_SILENT_ARGS, *self.args]
        return str(self.path), list(self.args)


def install_package(logger: logging.Logger, runner: ProcessRunner, package: InstallerPackage) -> bool:
    if not package.path.is_file():
        logger.warning("⚠️  Installer for %s not found: %s; skipping", package.name, package.path)
        return False

    command, args = package.command()
    logger.info("Installing %s from %s", package.name, package.path)
    try:
        rc = runner.run(command, args)
    except OSError as e:
        logger.error("💥 Could not start installer for %s: %s", package.name, e)
        return False

    if rc == SUCCESS:
        logger.info("✅ %s installed", package.name)
        return True
    if rc in REBOOT_REQUIRED:
        logger.warning("⚠️  %s installed; reboot required (exit %d)", package.name, rc)
        return True

    logger.error("💥 %s installer failed with exit code %d", package.name, rc)
    return False


def install_packages(
    logger: logging.Logger, runner: ProcessRunner, packages: Iterable[InstallerPackage]
) -> Dict[str, bool]:
    """Install in order; one failure does not stop the rest."""
    results: Dict[str, bool] = {}
    for pkg in packages:
        results[pkg.name] = install_package(logger, runner, pkg)
    return results


def default_packages(
    browser_installer: Optional[Path],
    browser_args: Iterable[str],
    other_installer: Optional[Path],
    other_args: Iterable[str],
) -> List[InstallerPackage]:
    pkgs: List[InstallerPackage] = []
    if browser_installer is not None:
        pkgs.append(InstallerPackage("browser", Path(browser_installer), tuple(browser_args)))
    if other_installer is not None:
        pkgs.append(InstallerPackage("other", Path(other_installer), tuple(other_args)))
    return pkgs
