"""Free-text names for Mermaid ER diagrams and flowcharts."""
from __future__ import annotations

__version__ = "0.1.0"
