# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""
claudeline: one-line status for coding-assistant terminal sessions.
"""

__version__ = "0.1.0"
