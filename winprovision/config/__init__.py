# SPDX-License-Identifier: LGPL-3.0-or-later
# winprovision/config/__init__.py
"""Configuration loading (YAML/JSON) and resolved run settings."""

from .config_loader import Config
from .settings import ProvisionSettings

__all__ = ["Config", "ProvisionSettings"]
