# SPDX-License-Identifier: LGPL-3.0-or-later
# winprovision/orchestrator/__init__.py

from .orchestrator import Orchestrator, StepOutcome, StepStatus

__all__ = ["Orchestrator", "StepOutcome", "StepStatus"]
