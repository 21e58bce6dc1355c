"""
Snake game agent trained by neuroevolution.

The auto-mode snake is driven by a small fixed-topology MLP whose weights
are evolved online, one round per individual, by a generational genetic
algorithm. Training state is saved to a plain text file so that evolution
resumes across process restarts.
"""

__version__ = '0.1.0'
