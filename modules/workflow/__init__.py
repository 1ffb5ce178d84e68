"""
Workflow module.

WorkflowController: upload slots + Idle/Compositing/Generating/Ready/Failed.
ProgressTicker: rotating loading messages while generating.
"""

from modules.workflow.controller import WorkflowController
from modules.workflow.ticker import ProgressTicker

__all__ = ["WorkflowController", "ProgressTicker"]
