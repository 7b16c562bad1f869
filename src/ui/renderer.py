"""
Interfaz de usuario y renderizado.

Este módulo contiene la clase UIRenderer que dibuja la calculadora sobre un
lienzo numpy con OpenCV y resuelve qué botón hay bajo el puntero.
"""

import time

import cv2
import numpy as np

from config.settings import CalculatorConfig
from core.calculator import PHASE_ERROR, PHASE_RESULT, format_number
from core.keymap import BUTTON_ROWS, GRID_COLUMNS, ascii_symbols


# Colores BGR
BACKGROUND = (30, 30, 30)
PANEL = (45, 45, 45)
BORDER = (100, 200, 255)
TEXT = (255, 255, 255)
TEXT_DIM = (180, 180, 180)
RESULT_COLOR = (100, 255, 100)
ERROR_COLOR = (100, 100, 255)
DIGIT_KEY = (70, 70, 70)
OPERATOR_KEY = (0, 150, 255)
CONTROL_KEY = (110, 110, 110)
EQUALS_KEY = (80, 180, 80)
PRESSED_KEY = (220, 220, 220)

MARGIN = 20
DISPLAY_HEIGHT = 150
HISTORY_WIDTH = 320
STATUS_HEIGHT = 40


# ============================================================================
class UIRenderer:
    """
    Renderizador de la calculadora.

    Componentes visuales:
        1. Display: expresión pendiente (arriba) y número/resultado (grande)
        2. Rejilla de botones clicables
        3. Panel de historial (cálculos más recientes primero)
        4. Feedback: mensajes temporales de confirmación/error
        5. Línea de estado con atajos de teclado
    """

    def __init__(self, width, height, config=None):
        """
        Inicializa el renderizador y calcula la geometría de los botones.

        Args:
            width (int): Ancho de la ventana en píxeles
            height (int): Alto de la ventana en píxeles
            config (CalculatorConfig): Configuración (opcional)
        """
        self.width = width
        self.height = height
        self.config = config if config else CalculatorConfig()
        self.feedback_msg = ""
        self.feedback_timer = 0
        self.feedback_color = (0, 255, 0)
        self.pressed_label = None
        self.pressed_timer = 0

        self.calc_width = width - (HISTORY_WIDTH + MARGIN if self.config.show_history else 0)
        self.buttons = self._layout_buttons()

    def _layout_buttons(self):
        """
        Calcula el rectángulo de cada botón.

        Returns:
            list: [(etiqueta, (x1, y1, x2, y2)), ...]
        """
        top = MARGIN * 2 + DISPLAY_HEIGHT
        bottom = self.height - STATUS_HEIGHT
        cell_w = (self.calc_width - 2 * MARGIN) // GRID_COLUMNS
        cell_h = (bottom - top) // len(BUTTON_ROWS)

        buttons = []
        for row_index, row in enumerate(BUTTON_ROWS):
            y1 = top + row_index * cell_h
            column = 0
            for label, span in row:
                x1 = MARGIN + column * cell_w
                x2 = x1 + span * cell_w
                # 4 px de separación entre botones
                buttons.append((label, (x1 + 4, y1 + 4, x2 - 4, y1 + cell_h - 4)))
                column += span
        return buttons

    def set_history_visible(self, visible):
        """Muestra u oculta el panel de historial y recoloca los botones."""
        self.config.show_history = visible
        self.calc_width = self.width - (HISTORY_WIDTH + MARGIN if visible else 0)
        self.buttons = self._layout_buttons()

    def new_frame(self):
        """Lienzo vacío del tamaño de la ventana."""
        return np.full((self.height, self.width, 3), BACKGROUND, dtype=np.uint8)

    def button_at(self, x, y):
        """
        Etiqueta del botón que contiene el punto (x, y).

        Returns:
            str|None: Etiqueta del botón, None si el punto cae fuera de la rejilla
        """
        for label, (x1, y1, x2, y2) in self.buttons:
            if x1 <= x <= x2 and y1 <= y <= y2:
                return label
        return None

    def show_feedback(self, msg, color=(0, 255, 0), duration=None):
        """
        Muestra mensaje de feedback temporal.

        Args:
            msg (str): Mensaje a mostrar
            color (tuple): Color BGR del mensaje
            duration (int): Duración en frames (por defecto config.feedback_duration)
        """
        self.feedback_msg = ascii_symbols(msg)
        self.feedback_color = color
        self.feedback_timer = duration if duration is not None else self.config.feedback_duration

    def press(self, label, duration=6):
        """Resalta un botón durante unos frames."""
        self.pressed_label = label
        self.pressed_timer = duration

    def draw_display(self, img, calc):
        """
        Dibuja el display de la calculadora.

        Args:
            img (np.array): Imagen sobre la cual dibujar
            calc (Calculator): Sesión con el estado actual

        Colores del display:
            - Blanco: Número en edición
            - Verde: Resultado de cálculo
            - Rojo: Error
        """
        x, y, w, h = MARGIN, MARGIN, self.calc_width - 2 * MARGIN, DISPLAY_HEIGHT
        cv2.rectangle(img, (x, y), (x + w, y + h), PANEL, -1)
        cv2.rectangle(img, (x, y), (x + w, y + h), BORDER, 3)

        expr = ascii_symbols(calc.get_expression())
        if expr:
            self._put_right(img, expr, x + w - 20, y + 40, cv2.FONT_HERSHEY_SIMPLEX,
                            0.9, TEXT_DIM, 2)

        phase = calc.phase
        color = TEXT
        if phase == PHASE_ERROR:
            color = ERROR_COLOR
        elif phase == PHASE_RESULT:
            color = RESULT_COLOR

        display = calc.get_display()
        scale = self._fit_scale(display, cv2.FONT_HERSHEY_DUPLEX, w - 40, 3.0, 4)
        self._put_right(img, display, x + w - 20, y + h - 30, cv2.FONT_HERSHEY_DUPLEX,
                        scale, color, 4)

    def draw_buttons(self, img):
        """Dibuja la rejilla de botones, resaltando el último pulsado."""
        for label, (x1, y1, x2, y2) in self.buttons:
            fill = self._button_color(label)
            if label == self.pressed_label and self.pressed_timer > 0:
                fill = PRESSED_KEY
            cv2.rectangle(img, (x1, y1), (x2, y2), fill, -1)
            cv2.rectangle(img, (x1, y1), (x2, y2), (20, 20, 20), 2)

            caption = ascii_symbols(label)
            (tw, th), _ = cv2.getTextSize(caption, cv2.FONT_HERSHEY_DUPLEX, 1.2, 2)
            tx = x1 + (x2 - x1 - tw) // 2
            ty = y1 + (y2 - y1 + th) // 2
            cv2.putText(img, caption, (tx, ty), cv2.FONT_HERSHEY_DUPLEX, 1.2, TEXT, 2)

        if self.pressed_timer > 0:
            self.pressed_timer -= 1

    def history_result(self, entry):
        """Texto "= resultado" de una entrada, con el formato del display."""
        return f"= {format_number(entry.result, self.config.significant_digits)}"

    def draw_history(self, img, entries):
        """
        Dibuja el panel de historial.

        Args:
            img (np.array): Imagen sobre la cual dibujar
            entries (list): HistoryEntry en orden de creación
        """
        if not self.config.show_history:
            return

        x, y = self.width - HISTORY_WIDTH - MARGIN, MARGIN
        w, h = HISTORY_WIDTH, self.height - STATUS_HEIGHT - 2 * MARGIN
        cv2.rectangle(img, (x, y), (x + w, y + h), PANEL, -1)
        cv2.rectangle(img, (x, y), (x + w, y + h), (100, 100, 100), 2)
        cv2.putText(img, "HISTORIAL", (x + 20, y + 40),
                    cv2.FONT_HERSHEY_DUPLEX, 1.0, TEXT, 2)

        visible = self.config.get_visible_history(entries)
        if not visible:
            cv2.putText(img, "Sin calculos", (x + 20, y + 90),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.65, TEXT_DIM, 1)
            return

        cy = y + 85
        for entry in visible:
            if cy > y + h - 40:
                break
            cv2.putText(img, ascii_symbols(entry.expression), (x + 20, cy),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, TEXT_DIM, 1)
            cv2.putText(img, self.history_result(entry), (x + 20, cy + 26),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.75, RESULT_COLOR, 2)
            cy += 62

    def draw_feedback(self, img):
        """
        Dibuja mensaje de feedback temporal con fade-out.

        Args:
            img (np.array): Imagen sobre la cual dibujar
        """
        if self.feedback_timer <= 0:
            return
        self.feedback_timer -= 1
        alpha = min(self.feedback_timer / 20.0, 1.0)

        x, y = MARGIN + 10, MARGIN * 2 + DISPLAY_HEIGHT - 8
        overlay = img.copy()
        cv2.rectangle(overlay, (x - 10, y - 30), (x + 380, y + 8), (40, 40, 40), -1)
        cv2.addWeighted(overlay, alpha * 0.88, img, 1 - alpha * 0.88, 0, img)

        color = tuple(int(c * alpha) for c in self.feedback_color)
        cv2.putText(img, self.feedback_msg, (x, y), cv2.FONT_HERSHEY_DUPLEX, 0.8, color, 2)

    def draw_status(self, img, voice_enabled):
        """Línea inferior con atajos e indicador de voz."""
        y = self.height - 14
        cv2.putText(img, "q: salir | v: voz | h: historial | b: borrar historial",
                    (MARGIN, y), cv2.FONT_HERSHEY_SIMPLEX, 0.55, (200, 200, 200), 1)
        if voice_enabled:
            cv2.putText(img, "VOZ: ON", (self.width - 120, y),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.55, (0, 255, 0), 2)
        # Cursor parpadeante a 1Hz para indicar que la ventana está activa
        if int(time.time() * 2) % 2 == 0:
            cv2.circle(img, (self.width - 140, y - 5), 5, (0, 255, 0), -1)

    def _button_color(self, label):
        if label.isdigit() or label == ".":
            return DIGIT_KEY
        if label == "=":
            return EQUALS_KEY
        if label in ("AC", "CE", "⌫"):
            return CONTROL_KEY
        return OPERATOR_KEY

    def _fit_scale(self, text, font, max_width, scale, thickness):
        """Reduce la escala de fuente hasta que el texto quepa en max_width."""
        while scale > 0.6:
            text_w = cv2.getTextSize(text, font, scale, thickness)[0][0]
            if text_w <= max_width:
                break
            scale -= 0.2
        return scale

    def _put_right(self, img, text, right_x, baseline_y, font, scale, color, thickness):
        text_w = cv2.getTextSize(text, font, scale, thickness)[0][0]
        cv2.putText(img, text, (right_x - text_w, baseline_y), font, scale, color, thickness)
