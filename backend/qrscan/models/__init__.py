from __future__ import annotations

from qrscan.models.scan import Scan

__all__ = ["Scan"]
