"""
Traducción de teclas y botones a eventos de la calculadora.

Las teclas llegan como códigos de cv2.waitKeyEx() y los botones como la
etiqueta de la celda pulsada en la rejilla. Ambos caminos producen los mismos
eventos (Digit, Decimal, Operator, Equals, Clear, AllClear, Backspace), de
modo que el reductor no distingue teclado de ratón.
"""

from .calculator import (AllClear, Backspace, Clear, Decimal, Digit, Equals,
                         Operator, ADD, SUBTRACT, MULTIPLY, DIVIDE)


# ============================================================================
# CÓDIGOS DE TECLA (cv2.waitKeyEx)
# Los códigos especiales dependen del backend de HighGUI:
#   - GTK (Linux): teclas del keypad en 0xFFxx
#   - Windows: código de tecla virtual desplazado 16 bits
# ============================================================================
KEY_ENTER_CODES = (10, 13, 0xFF8D)          # Enter, Return, Enter del keypad
KEY_ESCAPE = 27
KEY_BACKSPACE_CODES = (8, 127)              # 127 = Backspace en macOS
KEY_DELETE_CODES = (0xFFFF, 0x2E0000)       # Supr en GTK y Windows

KEYPAD_DIGIT_BASE = 0xFFB0                  # 0xFFB0-0xFFB9 = 0-9 del keypad
KEYPAD_OPERATORS = {
    0xFFAB: ADD,
    0xFFAD: SUBTRACT,
    0xFFAA: MULTIPLY,
    0xFFAF: DIVIDE,
}
KEYPAD_DECIMAL = 0xFFAE

CHAR_OPERATORS = {
    "+": ADD,
    "-": SUBTRACT,
    "*": MULTIPLY,
    "/": DIVIDE,
}

# Comandos de la aplicación (no llegan al reductor)
COMMAND_QUIT = "quit"
COMMAND_TOGGLE_VOICE = "toggle_voice"
COMMAND_TOGGLE_HISTORY = "toggle_history"
COMMAND_CLEAR_HISTORY = "clear_history"

APP_COMMANDS = {
    "q": COMMAND_QUIT,
    "v": COMMAND_TOGGLE_VOICE,
    "h": COMMAND_TOGGLE_HISTORY,
    "b": COMMAND_CLEAR_HISTORY,
}


def _char_for(code):
    """Carácter imprimible de un código de tecla, o None."""
    if 32 <= code < 127:
        return chr(code)
    return None


def event_for_key(code):
    """
    Traduce un código de tecla a un evento de la calculadora.

    Args:
        code (int): Código devuelto por cv2.waitKeyEx() (-1 = sin tecla)

    Returns:
        evento|None: Evento correspondiente, None si la tecla no es de la calculadora

    Mapa:
        - 0-9 (y keypad) → Digit
        - . , (y keypad) → Decimal
        - + - * / (y keypad) → Operator
        - Enter, = → Equals
        - Esc → AllClear
        - Backspace → Backspace (borra un dígito)
        - Supr, c → Clear (CE)
    """
    if code is None or code < 0:
        return None

    if code in KEY_ENTER_CODES:
        return Equals()
    if code == KEY_ESCAPE:
        return AllClear()
    if code in KEY_BACKSPACE_CODES:
        return Backspace()
    if code in KEY_DELETE_CODES:
        return Clear()

    # Teclado numérico (GTK)
    if KEYPAD_DIGIT_BASE <= code <= KEYPAD_DIGIT_BASE + 9:
        return Digit(code - KEYPAD_DIGIT_BASE)
    if code in KEYPAD_OPERATORS:
        return Operator(KEYPAD_OPERATORS[code])
    if code == KEYPAD_DECIMAL:
        return Decimal()

    char = _char_for(code)
    if char is None:
        return None
    if char.isdigit():
        return Digit(int(char))
    if char in ".,":
        return Decimal()
    if char in CHAR_OPERATORS:
        return Operator(CHAR_OPERATORS[char])
    if char == "=":
        return Equals()
    if char in "cC":
        return Clear()
    return None


def command_for_key(code):
    """Comando de la aplicación asociado a una tecla (q, v, h, b), o None."""
    if code is None or code < 0:
        return None
    char = _char_for(code)
    if char is None:
        return None
    return APP_COMMANDS.get(char.lower())


# ============================================================================
# REJILLA DE BOTONES
# Cada fila es una lista de (etiqueta, columnas que ocupa)
# ============================================================================
BUTTON_ROWS = [
    [("AC", 1), ("CE", 1), ("⌫", 1), (DIVIDE, 1)],
    [("7", 1), ("8", 1), ("9", 1), (MULTIPLY, 1)],
    [("4", 1), ("5", 1), ("6", 1), (SUBTRACT, 1)],
    [("1", 1), ("2", 1), ("3", 1), (ADD, 1)],
    [("0", 2), (".", 1), ("=", 1)],
]
GRID_COLUMNS = 4

_BUTTON_EVENTS = {
    "AC": AllClear(),
    "CE": Clear(),
    "⌫": Backspace(),
    ".": Decimal(),
    "=": Equals(),
}

# Sustitutos ASCII: las fuentes Hershey de OpenCV no dibujan × ÷ ⌫
_ASCII_SYMBOLS = {
    MULTIPLY: "x",
    DIVIDE: "/",
    "⌫": "<-",
}


def event_for_button(label):
    """
    Evento asociado a la etiqueta de un botón de la rejilla.

    Raises:
        KeyError: Si la etiqueta no pertenece a la rejilla
    """
    if label in _BUTTON_EVENTS:
        return _BUTTON_EVENTS[label]
    if label.isdigit():
        return Digit(int(label))
    if label in (ADD, SUBTRACT, MULTIPLY, DIVIDE):
        return Operator(label)
    raise KeyError(label)


def button_labels():
    """Todas las etiquetas de la rejilla, fila a fila."""
    return [label for row in BUTTON_ROWS for label, _ in row]


def label_for_event(event):
    """Etiqueta del botón que produce un evento (para resaltarlo), o None."""
    for label in button_labels():
        if event_for_button(label) == event:
            return label
    return None


def ascii_symbols(text):
    """Reemplaza × ÷ ⌫ por equivalentes ASCII dibujables con cv2.putText."""
    for symbol, ascii_text in _ASCII_SYMBOLS.items():
        text = text.replace(symbol, ascii_text)
    return text
