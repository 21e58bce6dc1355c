"""
Training infrastructure for the snake AI.

This module provides:
- SaveStateManager: plain-text save file shared by every session
- TrainingLogger: JSON-lines log of generation statistics
- Trainer: headless training loop
"""
from .checkpoints import SaveStateManager, ScoreRecord, TrainingLogger
from .trainer import Trainer, TrainingConfig, TrainingResult

__all__ = [
    'SaveStateManager',
    'ScoreRecord',
    'TrainingLogger',
    'Trainer',
    'TrainingConfig',
    'TrainingResult',
]
