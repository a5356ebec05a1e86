"""
One-shot VM health probe: samples CPU, memory and root disk utilization against a fixed threshold.
"""

__all__ = ["cpu", "system_state", "diagnostics", "formatting", "errors", "units", "cli"]
__version__ = "0.1.0"
