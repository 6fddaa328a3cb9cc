"""Application services for pkgrestore.

Services coordinate the package layer (planning, adapters, execution) and
report through the console they are given.
"""

from pkgrestore.services.restore import RestoreService
from pkgrestore.services.restore_errors import RestoreError

__all__ = [
    "RestoreError",
    "RestoreService",
]
