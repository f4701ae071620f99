"""
Queue workers.
"""
from .expedition_worker import ExpeditionWorker

__all__ = ['ExpeditionWorker']
