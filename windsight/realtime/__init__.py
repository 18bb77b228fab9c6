"""
Real-Time Module — Periodic Perturb-and-Score Loop

Public API:
- SamplingLoop: asyncio driver (start/stop/run_cycle)
- LoopState: IDLE/RUNNING
"""

from .loop import LoopState, SamplingLoop

__all__ = [
    "LoopState",
    "SamplingLoop",
]
