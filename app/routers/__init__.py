"""
Routers package.
API endpoints: calcoli compenso, documenti generati e profilo utente.
"""
from . import calcoli, documenti, profilo

__all__ = [
    "calcoli",
    "documenti",
    "profilo",
]
