from pathlib import Path


# Project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Log directory
LOG_DIR = BASE_DIR / 'logs'

# Alembic script location
ALEMBIC_DIR = BASE_DIR / 'src' / 'platform' / 'alembic'
