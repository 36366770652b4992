"""
Schedule Kernel - SAM project scheduling core

A working-day scheduling system with:
- Backward/forward phase layout around a kickoff date
- Holiday-aware working-day arithmetic
- Progress and variance tracking
- Blocker-driven date recalculation
"""

__version__ = "0.1.0"
