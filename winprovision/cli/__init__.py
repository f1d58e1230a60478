# SPDX-License-Identifier: LGPL-3.0-or-later
# winprovision/cli/__init__.py
