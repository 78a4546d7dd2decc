"""Arsana letter archive - calendar feed and scheduled notifications"""

from __future__ import annotations

__version__ = "1.0.0"
