"""
Pytest configuration and shared fixtures for the snake AI project.

This module provides fixtures for:
- Seeded random sources
- Temporary save-file locations
"""
import random

import pytest
import torch


@pytest.fixture
def generator():
    """Return a seeded torch generator."""
    return torch.Generator().manual_seed(1234)


@pytest.fixture
def rng():
    """Return a seeded random source for food placement."""
    return random.Random(1234)


@pytest.fixture
def save_path(tmp_path):
    """Return a save-file path inside a directory that doesn't exist yet."""
    return tmp_path / 'save' / 'save_state.txt'
