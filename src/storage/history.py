"""
Historial de cálculos persistente.

Este módulo contiene las entradas de historial, el contrato de almacenamiento
(append / load_all / clear) y sus implementaciones: en memoria y en un
fichero JSON local. HistoryWriter envuelve cualquier almacén y escribe en un
hilo aparte para que la calculadora nunca espere al disco.
"""

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


class HistoryError(Exception):
    """El historial guardado no se puede leer o tiene un formato inválido."""


# ============================================================================
# CLASE: HistoryEntry
# Propósito: Registro inmutable de un cálculo completado con "="
# ============================================================================
@dataclass(frozen=True)
class HistoryEntry:
    """
    Un cálculo completado.

    Campos:
        - id (str): Identificador único (uuid4 hex)
        - expression (str): Expresión legible "a op b"
        - result (float): Resultado numérico
        - timestamp (datetime): Momento del cálculo
    """
    id: str
    expression: str
    result: float
    timestamp: datetime

    def __str__(self):
        from core.calculator import format_number  # core.calculator importa este módulo
        return f"{self.expression} = {format_number(self.result)}"

    def to_dict(self):
        """Registro serializable {id, expression, result, timestamp}."""
        return {
            "id": self.id,
            "expression": self.expression,
            "result": self.result,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data):
        """
        Reconstruye una entrada desde un registro guardado.

        Raises:
            HistoryError: Si faltan campos o tienen un tipo inválido
        """
        try:
            return cls(
                id=str(data["id"]),
                expression=str(data["expression"]),
                result=float(data["result"]),
                timestamp=datetime.fromisoformat(data["timestamp"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise HistoryError(f"registro de historial inválido: {data!r}") from e


# ============================================================================
# CONTRATO DE ALMACENAMIENTO
# ============================================================================
class HistoryStore(ABC):
    """Capacidad de persistencia que recibe la calculadora."""

    @abstractmethod
    def append(self, entry):
        """Añade una entrada al final del historial."""

    @abstractmethod
    def load_all(self):
        """Devuelve todas las entradas en orden de creación."""

    @abstractmethod
    def clear(self):
        """Borra el historial completo."""


class MemoryHistoryStore(HistoryStore):
    def __init__(self, entries=None):
        self._entries = list(entries or [])

    def append(self, entry):
        self._entries.append(entry)

    def load_all(self):
        return list(self._entries)

    def clear(self):
        self._entries.clear()


class JsonHistoryStore(HistoryStore):
    """
    Historial guardado como array JSON en un fichero local.

    Formato:
        [{"id": "...", "expression": "5 + 3", "result": 8.0,
          "timestamp": "2026-01-01T10:00:00+00:00"}, ...]

    Cada append() reescribe el fichero completo a través de un temporal y
    os.replace(), de modo que un fallo a mitad de escritura nunca deja un
    fichero a medias.
    """

    def __init__(self, path):
        """
        Args:
            path (str|Path): Ruta del fichero JSON (se crea al primer append)
        """
        self.path = Path(path)

    def load_all(self):
        """
        Lee el historial del disco.

        Returns:
            list[HistoryEntry]: Entradas guardadas ([] si el fichero no existe)

        Raises:
            HistoryError: Si el fichero no es JSON válido o no es un array
        """
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise HistoryError(f"no se pudo leer {self.path}: {e}") from e
        if not isinstance(data, list):
            raise HistoryError(f"{self.path} no contiene una lista de cálculos")
        return [HistoryEntry.from_dict(record) for record in data]

    def append(self, entry):
        entries = self.load_all()
        entries.append(entry)
        self._write(entries)

    def clear(self):
        self._write([])

    def _write(self, entries):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([e.to_dict() for e in entries], ensure_ascii=False, indent=2)

        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".historial-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


# ============================================================================
# CLASE: HistoryWriter
# Propósito: Escritura del historial en segundo plano
# Responsabilidades:
#   - Mantener en memoria las entradas para que la UI las lea sin E/S
#   - Encolar las escrituras y procesarlas en un hilo separado
#   - Informar de los fallos del almacén sin interrumpir la calculadora
# ============================================================================
class HistoryWriter:
    """
    Envoltorio asíncrono de un HistoryStore.

    Características:
        - append() vuelve inmediatamente (la escritura ocurre en otro hilo)
        - load_all() responde desde la caché cargada al arrancar
        - Un fallo de lectura al arrancar deja el historial vacío
        - Un fallo de escritura se informa por consola y se descarta
    """

    def __init__(self, store):
        """
        Args:
            store (HistoryStore): Almacén real
        """
        self.store = store
        self.failed_writes = 0
        self._pending = deque()
        self._lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()
        self._running = False

        try:
            self._entries = store.load_all()
            print(f"✓ Historial cargado: {len(self._entries)} cálculos")
        except HistoryError as e:
            print(f"⚠ Advertencia: historial ilegible, se empieza vacío: {e}")
            self._entries = []

    def append(self, entry):
        with self._lock:
            self._entries.append(entry)
            self._pending.append(("append", entry))
            self._start_worker()

    def load_all(self):
        with self._lock:
            return list(self._entries)

    def clear(self):
        with self._lock:
            self._entries = []
            self._pending.append(("clear", None))
            self._start_worker()

    def flush(self, timeout=None):
        """
        Espera a que se escriban las operaciones pendientes.

        Returns:
            bool: True si la cola quedó vacía antes del timeout
        """
        return self._idle.wait(timeout)

    def _start_worker(self):
        # Se llama con el lock tomado
        self._idle.clear()
        if not self._running:
            self._running = True
            thread = threading.Thread(target=self._process_queue, daemon=True)
            thread.start()

    def _process_queue(self):
        """Procesa la cola de escrituras una por una."""
        while True:
            with self._lock:
                if not self._pending:
                    self._running = False
                    self._idle.set()
                    return
                action, entry = self._pending.popleft()
            try:
                if action == "append":
                    self.store.append(entry)
                else:
                    self.store.clear()
            except (OSError, HistoryError) as e:
                self.failed_writes += 1
                print(f"⚠ Error al guardar historial: {e}")
