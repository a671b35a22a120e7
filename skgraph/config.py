from __future__ import annotations
import os
from pathlib import Path

# Resolve installation dir (skgraph package directory)
_SKGRAPH_DIR = Path(__file__).resolve().parent

# Bundled basis
_DEFAULT_PRELUDE_DIR = _SKGRAPH_DIR / 'prelude'
_DEFAULT_DEFS_FILE = _DEFAULT_PRELUDE_DIR / 'sk-basis.lisp'

DEFS_PATH_VAR = 'SKGRAPH_DEFS_PATH'

# Expressions evaluated by the CLI when none are given
DEFAULT_EXPRESSIONS = ('(I a)', '((K a) b)')


def path_from_env(var: str, default: Path) -> Path:
    """First entry of an os.pathsep separated variable, or `default` when unset."""
    raw = os.environ.get(var, '')
    entries = [p.strip() for p in raw.split(os.pathsep) if p.strip()]
    return Path(entries[0]) if entries else Path(default)


def get_definitions_path() -> Path:
    # A directory means "sk-basis.lisp inside it"
    p = path_from_env(DEFS_PATH_VAR, _DEFAULT_DEFS_FILE)
    return p / _DEFAULT_DEFS_FILE.name if p.is_dir() else p
