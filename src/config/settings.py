"""
Configuración de la calculadora.

Este módulo contiene la configuración centralizada: precisión de los
resultados, feedback por voz, historial persistente y ventana.
"""

from pathlib import Path


DEFAULT_HISTORY_FILE = "~/.calculadora/historial.json"


# ============================================================================
# CLASE: CalculatorConfig
# Propósito: Preferencias de la calculadora
# Responsabilidades:
#   - Fijar la precisión con la que se muestran los resultados
#   - Almacenar preferencias de voz (volumen, velocidad, idioma)
#   - Indicar dónde y cómo se guarda y se muestra el historial
#   - Definir tamaño y título de la ventana
# ============================================================================
class CalculatorConfig:
    """
    Configuración de la calculadora con valores por defecto.

    Los valores se pueden modificar tras crear la instancia (main.py lo hace
    a partir de los argumentos de línea de comandos).
    """

    def __init__(self):
        """Inicializa configuración con valores por defecto."""
        # ====================================================================
        # PRECISIÓN
        # ====================================================================
        self.significant_digits = 12        # Cifras significativas de los resultados

        # ====================================================================
        # CONFIGURACIÓN DE VOZ
        # ====================================================================
        self.voice_enabled = True           # Activar/desactivar feedback por voz
        self.voice_volume = 0.8             # Volumen (0.0-1.0)
        self.voice_rate = 150               # Velocidad de habla (palabras por minuto)
        self.voice_language = 'es'          # Idioma ('es', 'en', etc.)

        # ====================================================================
        # HISTORIAL
        # ====================================================================
        self.history_enabled = True         # Guardar cálculos en disco
        self.history_file = DEFAULT_HISTORY_FILE
        self.show_history = True            # Mostrar panel de historial
        self.history_visible_entries = 8    # Entradas visibles en el panel

        # ====================================================================
        # VENTANA
        # ====================================================================
        self.window_title = 'Calculadora'
        self.window_width = 900             # Píxeles
        self.window_height = 640
        self.feedback_duration = 40         # Frames (~1.3s @ 30fps)

    def get_history_path(self):
        """Ruta absoluta del fichero de historial (con ~ expandido)."""
        return Path(self.history_file).expanduser()

    def get_visible_history(self, entries):
        """
        Selecciona las entradas que caben en el panel.

        Args:
            entries (list): Entradas en orden de creación

        Returns:
            list: Las más recientes primero, como máximo history_visible_entries
        """
        if self.history_visible_entries <= 0:
            return []
        return list(reversed(entries[-self.history_visible_entries:]))
