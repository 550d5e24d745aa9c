from .heuristic import HeuristicPolicy
from .manual import ManualPolicy

__all__ = ["HeuristicPolicy", "ManualPolicy"]
