# Core type aliases for the skgraph data model.
# Source text is read into plain Python values before graph building:
# - atoms -> str
# - lists -> list (0, 1, 2 or more items; the parser folds 3+ into nested pairs)
#
# Naming guidance:
# - SExpression: reader/builder code handling syntactic forms.
# - NodeId:     the string ids used in trace snapshots ("n12").

from typing import Any

SExpression = Any
NodeId = str

__version__ = "0.1.0"
