# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/__init__.py
"""
winprovision - Windows deployment task-sequence steps

Branding of the default user profile, silent software installation and a
robust folder mirror, run in order by a single orchestrator.

Usage as a library:

    from winprovision import Orchestrator, ProvisionSettings
    from winprovision.core.logger import Log

    logger = Log.setup(verbose=1, log_dir="C:/Windows/Temp/winprovision")
    outcomes = Orchestrator(logger, ProvisionSettings()).run()
"""

__version__ = "0.1.0"

from .config.settings import ProvisionSettings
from .orchestrator import Orchestrator

__all__ = [
    "__version__",
    "Orchestrator",
    "ProvisionSettings",
]
