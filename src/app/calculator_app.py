"""
Aplicación principal que integra todos los componentes.

Este módulo contiene la clase CalculatorApp.
"""

import cv2

from config.settings import CalculatorConfig
from core.calculator import AllClear, Calculator, Clear, Operator, PHASE_ERROR
from core.keymap import (COMMAND_CLEAR_HISTORY, COMMAND_QUIT, COMMAND_TOGGLE_HISTORY,
                         COMMAND_TOGGLE_VOICE, command_for_key, event_for_button,
                         event_for_key, label_for_event)
from storage.history import HistoryWriter, JsonHistoryStore, MemoryHistoryStore
from ui.renderer import UIRenderer
from voice.feedback import VoiceFeedback


# ============================================================================
class CalculatorApp:
    """
    Aplicación de calculadora con ventana OpenCV.

    Arquitectura:
        - Calculator: Reductor de estados y sesión (único escritor del estado)
        - HistoryWriter: Historial persistente escrito en segundo plano
        - UIRenderer: Renderizado de display, botones e historial
        - VoiceFeedback: Anuncio por voz de teclas y resultados
        - CalculatorApp: Coordinador y bucle principal

    Entradas:
        - Teclado: códigos de cv2.waitKeyEx() traducidos por core.keymap
        - Ratón: clic izquierdo sobre un botón de la rejilla
    """

    def __init__(self, config=None, history=None, voice=None):
        """
        Inicializa la aplicación.

        Args:
            config (CalculatorConfig): Configuración (opcional)
            history: Colaborador de historial (por defecto, según config)
            voice (VoiceFeedback): Feedback por voz (por defecto, según config)
        """
        self.config = config if config else CalculatorConfig()
        self.history = history if history is not None else self._create_history()
        self.calc = Calculator(self.history, precision=self.config.significant_digits)
        self.ui = UIRenderer(self.config.window_width, self.config.window_height, self.config)
        self.voice = voice if voice is not None else VoiceFeedback(self.config)
        self.running = False

    def _create_history(self):
        """HistoryWriter sobre fichero JSON, o en memoria si está desactivado."""
        if not self.config.history_enabled:
            print("⚠ Historial persistente desactivado: los cálculos no se guardarán")
            return HistoryWriter(MemoryHistoryStore())
        path = self.config.get_history_path()
        print(f"OK Historial: {path}")
        return HistoryWriter(JsonHistoryStore(path))

    def handle_event(self, event):
        """
        Aplica un evento de entrada y genera el feedback correspondiente.

        Args:
            event: Evento de la calculadora

        Returns:
            HistoryEntry|None: Entrada creada si el evento completó un cálculo

        Feedback:
            - Color verde: resultado de cálculo
            - Color naranja: operadores
            - Color rojo: error o borrado
        """
        before = self.calc.state
        entry = self.calc.press(event)
        after = self.calc.state

        label = label_for_event(event)
        if label is not None:
            self.ui.press(label)

        if after == before:
            # Evento sin efecto (ej: "=" sin operación pendiente)
            return entry

        if self.calc.phase == PHASE_ERROR:
            self.ui.show_feedback("Error: operacion no valida", (255, 50, 50), 60)
            self.voice.speak_result(after.display)
            return entry

        if entry is not None:
            self.ui.show_feedback(f"{entry.expression} = {after.display}", (0, 255, 255), 60)
        elif isinstance(event, Operator):
            self.ui.show_feedback(f"{event.symbol} {self._operation_name(event.symbol)}",
                                  (0, 165, 255))
        elif isinstance(event, AllClear):
            self.ui.show_feedback("TODO BORRADO", (255, 50, 50))
        elif isinstance(event, Clear):
            self.ui.show_feedback("CE BORRADO", (255, 200, 0))

        self.voice.speak_event(event, after.display)
        return entry

    def handle_command(self, command):
        """
        Ejecuta un comando de la aplicación.

        Args:
            command (str): quit, toggle_voice, toggle_history o clear_history
        """
        if command == COMMAND_QUIT:
            self.running = False

        elif command == COMMAND_TOGGLE_VOICE:
            if not self.config.voice_enabled and not self.voice.is_available():
                print("⚠ Voz no disponible")
                self.ui.show_feedback("VOZ NO DISPONIBLE", (255, 50, 50), 60)
                return
            self.config.voice_enabled = not self.config.voice_enabled
            status = "ACTIVADA" if self.config.voice_enabled else "DESACTIVADA"
            print(f"Voz: {status}")
            self.ui.show_feedback(f"VOZ {status}", (0, 255, 255), 60)
            if self.config.voice_enabled:
                self.voice.speak("voz activada")

        elif command == COMMAND_TOGGLE_HISTORY:
            self.ui.set_history_visible(not self.config.show_history)

        elif command == COMMAND_CLEAR_HISTORY:
            self.history.clear()
            self.ui.show_feedback("HISTORIAL BORRADO", (255, 50, 50))
            self.voice.speak("historial borrado")

    def handle_key(self, code):
        """
        Procesa un código de tecla de cv2.waitKeyEx().

        Returns:
            bool: True si la tecla produjo un evento o un comando
        """
        event = event_for_key(code)
        if event is not None:
            self.handle_event(event)
            return True
        command = command_for_key(code)
        if command is not None:
            self.handle_command(command)
            return True
        return False

    def on_mouse(self, event, x, y, flags, param):
        """Callback de ratón: un clic izquierdo pulsa el botón bajo el puntero."""
        if event != cv2.EVENT_LBUTTONDOWN:
            return
        label = self.ui.button_at(x, y)
        if label is not None:
            self.handle_event(event_for_button(label))

    def render(self):
        """Dibuja un frame completo con el estado actual."""
        frame = self.ui.new_frame()
        self.ui.draw_display(frame, self.calc)
        self.ui.draw_buttons(frame)
        self.ui.draw_history(frame, self.history.load_all())
        self.ui.draw_feedback(frame)
        self.ui.draw_status(frame, self.config.voice_enabled)
        return frame

    def run(self):
        """
        Bucle principal de la aplicación.

        Ciclo de ejecución:
            1. Renderizar el estado actual
            2. Mostrar el frame
            3. Esperar ~30ms por una tecla y procesarla
            4. Repetir hasta 'q' o cerrar la ventana
        """
        print("\n" + "=" * 70)
        print("CALCULADORA")
        print("=" * 70)
        print("\nNumeros: 0-9 | Decimal: . | Operaciones: + - * /")
        print("Calcular: Enter o = | Borrar todo: Esc | CE: Supr o c | Retroceso: Backspace")
        print("\nPresiona 'q' para salir, 'v' voz, 'h' historial, 'b' borrar historial")
        print("=" * 70 + "\n")

        title = self.config.window_title
        cv2.namedWindow(title)
        cv2.setMouseCallback(title, self.on_mouse)

        self.running = True
        try:
            while self.running:
                cv2.imshow(title, self.render())
                key = cv2.waitKeyEx(30)
                if key != -1:
                    self.handle_key(key)
                # Ventana cerrada con el botón del sistema
                if cv2.getWindowProperty(title, cv2.WND_PROP_VISIBLE) < 1:
                    break
        finally:
            cv2.destroyAllWindows()
            flush = getattr(self.history, "flush", None)
            if flush is not None and not flush(timeout=5):
                print("⚠ Quedaron cálculos sin guardar en el historial")
            print("\nOK Aplicacion cerrada correctamente")

    @staticmethod
    def _operation_name(symbol):
        return {"+": "SUMA", "-": "RESTA", "×": "MULTIPLICAR", "÷": "DIVIDIR"}[symbol]
