"""
Settings for the snake AI project.

Values can be overridden through environment variables, e.g.
``SNAKEAI_GA_POPULATION_SIZE=200 python -m snakeai train``.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_int(name, default):
    return int(os.environ.get(f'SNAKEAI_{name}', default))


def _env_float(name, default):
    return float(os.environ.get(f'SNAKEAI_{name}', default))


def _env_int_list(name, default):
    raw = os.environ.get(f'SNAKEAI_{name}')
    if raw is None:
        return list(default)
    return [int(value) for value in raw.replace(',', ' ').split()]


# World
GRID_SIDE_LENGTH = _env_int('GRID_SIDE_LENGTH', 31)

# Persistence
SAVE_STATE_FILE_PATH = os.environ.get(
    'SNAKEAI_SAVE_STATE_FILE_PATH',
    str(BASE_DIR / 'save' / 'save_state.txt'),
)
CHECKPOINT_INTERVAL = _env_int('CHECKPOINT_INTERVAL', 100)

# Snake MLP: sizes ordered from the first (non-input) layer to the output layer
SNAKE_MLP_INPUT_SIZE = _env_int('SNAKE_MLP_INPUT_SIZE', 5)
SNAKE_MLP_LAYER_SIZES = _env_int_list('SNAKE_MLP_LAYER_SIZES', [5, 5, 3])

# Genetic algorithm
GA_POPULATION_SIZE = _env_int('GA_POPULATION_SIZE', 1000)
GA_SURVIVORS_CNT = _env_int('GA_SURVIVORS_CNT', 50)
GA_MUTATION_RATE = _env_float('GA_MUTATION_RATE', 0.02)

# Headless rounds end after this many steps without eating
MAX_IDLE_STEPS = _env_int('MAX_IDLE_STEPS', GRID_SIDE_LENGTH * GRID_SIDE_LENGTH)

LOG_LEVEL = os.environ.get('SNAKEAI_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'snakeai': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}
