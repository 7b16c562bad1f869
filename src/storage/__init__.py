"""
Módulo de persistencia del historial.
Contiene las entradas de historial y los almacenes (memoria y JSON local).
"""

from .history import (HistoryEntry, HistoryError, HistoryStore, HistoryWriter,
                      JsonHistoryStore, MemoryHistoryStore)

__all__ = ['HistoryEntry', 'HistoryError', 'HistoryStore', 'HistoryWriter',
           'JsonHistoryStore', 'MemoryHistoryStore']
