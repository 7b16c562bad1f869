"""
Lógica de calculadora aritmética básica.

Este módulo contiene el reductor de estados de la calculadora: una función pura
que recibe el estado actual y un evento de entrada (dígito, punto decimal,
operador, igual, borrado) y devuelve el estado siguiente. Encima del reductor
vive la clase Calculator, que guarda el estado de la sesión y entrega cada
cálculo completado al historial.
"""

import math
import uuid
from collections import namedtuple
from dataclasses import dataclass
from datetime import datetime, timezone

from storage.history import HistoryEntry


# ============================================================================
# CONSTANTES
# ============================================================================
ERROR_DISPLAY = "Error"             # Marcador de error mostrado en el display
DEFAULT_PRECISION = 12              # Dígitos significativos de los resultados
MAX_INPUT_DIGITS = 15               # Dígitos tecleables por operando (exactos en float)

ADD = "+"
SUBTRACT = "-"
MULTIPLY = "×"
DIVIDE = "÷"
OPERATIONS = (ADD, SUBTRACT, MULTIPLY, DIVIDE)

# Alias ASCII aceptados al construir operadores (teclado)
OPERATION_ALIASES = {"*": MULTIPLY, "/": DIVIDE}

# Fases del autómata (derivadas del estado, no almacenadas)
PHASE_IDLE = "idle"
PHASE_OPERAND = "operand"
PHASE_OPERATOR_PENDING = "operator_pending"
PHASE_RESULT = "result"
PHASE_ERROR = "error"


class CalculatorError(ArithmeticError):
    """Error aritmético recuperable dentro del reductor."""


class DivisionByZero(CalculatorError, ZeroDivisionError):
    """División entre cero durante una evaluación."""


# ============================================================================
# ESTADO Y EVENTOS
# ============================================================================
class CalculatorState(namedtuple("CalculatorState", [
        "display", "previous_value", "operation", "waiting_for_operand"])):
    """
    Estado inmutable de la calculadora.

    Campos:
        - display (str): Texto mostrado (literal numérico o "Error")
        - previous_value (float|None): Operando izquierdo ya fijado
        - operation (str|None): Operador pendiente (+, -, ×, ÷)
        - waiting_for_operand (bool): El próximo dígito empieza un operando nuevo
    """
    __slots__ = ()

    @property
    def is_error(self):
        return self.display == ERROR_DISPLAY


INITIAL_STATE = CalculatorState("0", None, None, False)
ERROR_STATE = CalculatorState(ERROR_DISPLAY, None, None, True)


@dataclass(frozen=True)
class Digit:
    """Pulsación de un dígito 0-9."""
    digit: int

    def __post_init__(self):
        digit = self.digit
        if isinstance(digit, str) and digit.isdigit() and len(digit) == 1:
            digit = int(digit)
            object.__setattr__(self, "digit", digit)
        if isinstance(digit, bool) or not isinstance(digit, int) or not 0 <= digit <= 9:
            raise ValueError(f"dígito inválido: {self.digit!r}")


@dataclass(frozen=True)
class Operator:
    """Pulsación de un operador; acepta * y / como alias de × y ÷."""
    symbol: str

    def __post_init__(self):
        symbol = OPERATION_ALIASES.get(self.symbol, self.symbol)
        if symbol not in OPERATIONS:
            raise ValueError(f"operador inválido: {self.symbol!r}")
        object.__setattr__(self, "symbol", symbol)


@dataclass(frozen=True)
class Decimal:
    pass


@dataclass(frozen=True)
class Equals:
    pass


@dataclass(frozen=True)
class Clear:
    """Borra solo el operando en curso (CE)."""


@dataclass(frozen=True)
class AllClear:
    """Vuelve al estado inicial (AC)."""


@dataclass(frozen=True)
class Backspace:
    """Borra el último carácter tecleado del operando en curso."""


# Resultado puro de un "=" completado, antes de convertirse en HistoryEntry
Calculation = namedtuple("Calculation", ["expression", "result"])


# ============================================================================
# ARITMÉTICA Y FORMATO
# ============================================================================
def evaluate(a, op, b):
    """
    Aplica un operador binario a dos operandos.

    Args:
        a (float): Operando izquierdo
        op (str): Operador (+, -, ×, ÷)
        b (float): Operando derecho

    Returns:
        float: Resultado de la operación

    Raises:
        DivisionByZero: Si op es ÷ y b es 0
        CalculatorError: Si el resultado no es finito (desbordamiento)
    """
    if op == ADD:
        result = a + b
    elif op == SUBTRACT:
        result = a - b
    elif op == MULTIPLY:
        result = a * b
    elif op == DIVIDE:
        if b == 0:
            raise DivisionByZero(f"{format_number(a)} ÷ 0")
        result = a / b
    else:
        raise ValueError(f"operador inválido: {op!r}")

    if not math.isfinite(result):
        raise CalculatorError("resultado fuera de rango")
    return result


def format_number(value, precision=DEFAULT_PRECISION):
    """
    Convierte un resultado en el texto del display.

    Args:
        value (float): Número a mostrar
        precision (int): Dígitos significativos

    Returns:
        str: Literal numérico sin ceros finales

    Formateo:
        - 42.0 → "42"
        - 0.1 + 0.2 → "0.3" (el redondeo a 12 cifras oculta el error binario)
        - 1/3 → "0.333333333333"
        - -0.0 → "0"
        - Números muy grandes o pequeños usan notación exponencial (1e+20)
    """
    text = f"{value:.{precision}g}"
    if "e" not in text and "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", "-0.0"):
        text = "0"
    return text


def parse_display(display):
    """Valor numérico del display ("0." → 0.0)."""
    return float(display)


# ============================================================================
# REDUCTOR
# ============================================================================
def transition(state, event, precision=DEFAULT_PRECISION):
    """
    Calcula el estado siguiente para un evento de entrada.

    Args:
        state (CalculatorState): Estado actual
        event: Digit, Decimal, Operator, Equals, Clear, AllClear o Backspace
        precision (int): Dígitos significativos de los resultados

    Returns:
        tuple: (nuevo_estado, calculation)
            - calculation es un Calculation si el evento completó un "=",
              None en cualquier otro caso

    La función es pura: no hace E/S ni usa aleatoriedad, y nunca lanza
    excepciones para eventos válidos. La división entre cero y el
    desbordamiento se convierten en el estado de error.
    """
    if isinstance(event, Digit):
        return _input_digit(state, str(event.digit)), None
    if isinstance(event, Decimal):
        return _input_decimal(state), None
    if isinstance(event, Operator):
        return _input_operator(state, event.symbol, precision), None
    if isinstance(event, Equals):
        return _input_equals(state, precision)
    if isinstance(event, Clear):
        return state._replace(display="0", waiting_for_operand=False), None
    if isinstance(event, AllClear):
        return INITIAL_STATE, None
    if isinstance(event, Backspace):
        return _input_backspace(state), None
    raise TypeError(f"evento desconocido: {event!r}")


def apply(state, event, precision=DEFAULT_PRECISION):
    """Versión de transition() que devuelve solo el estado."""
    return transition(state, event, precision)[0]


def _input_digit(state, digit):
    if state.waiting_for_operand:
        return state._replace(display=digit, waiting_for_operand=False)
    if state.display == "0":
        return state._replace(display=digit)
    # Límite de dígitos por operando (prevenir overflow visual y valores inf)
    if sum(ch.isdigit() for ch in state.display) >= MAX_INPUT_DIGITS:
        return state
    return state._replace(display=state.display + digit)


def _input_decimal(state):
    if state.waiting_for_operand:
        return state._replace(display="0.", waiting_for_operand=False)
    if "." in state.display:
        return state
    return state._replace(display=state.display + ".")


def _input_operator(state, op, precision):
    if state.is_error:
        return state

    # Primer operador: el display pasa a ser el operando izquierdo
    if state.previous_value is None:
        return CalculatorState(
            display=state.display,
            previous_value=parse_display(state.display),
            operation=op,
            waiting_for_operand=True,
        )

    # Dos operadores seguidos: solo se sustituye el pendiente
    if state.waiting_for_operand:
        return state._replace(operation=op)

    # Encadenado: se evalúa de izquierda a derecha sin precedencia
    try:
        result = evaluate(state.previous_value, state.operation, parse_display(state.display))
    except CalculatorError:
        return ERROR_STATE
    return CalculatorState(
        display=format_number(result, precision),
        previous_value=result,
        operation=op,
        waiting_for_operand=True,
    )


def _input_equals(state, precision):
    if state.previous_value is None or state.operation is None:
        return state, None

    operand = parse_display(state.display)
    expression = describe(state.previous_value, state.operation, state.display, precision)
    try:
        result = evaluate(state.previous_value, state.operation, operand)
    except CalculatorError:
        return ERROR_STATE, None

    new_state = CalculatorState(
        display=format_number(result, precision),
        previous_value=None,
        operation=None,
        waiting_for_operand=True,
    )
    return new_state, Calculation(expression, result)


def _input_backspace(state):
    if state.waiting_for_operand or state.is_error:
        return state
    trimmed = state.display[:-1]
    if trimmed in ("", "-", "-0"):
        trimmed = "0"
    return state._replace(display=trimmed)


# ============================================================================
# CONSULTAS SOBRE EL ESTADO
# ============================================================================
def describe(a, op, display, precision=DEFAULT_PRECISION):
    """
    Expresión "a op b" usada en el historial.

    Args:
        a (float): Operando izquierdo
        op (str): Operador
        display (str): Texto del operando derecho tal como se tecleó
        precision (int): Dígitos significativos preferidos para a

    Returns:
        str: Expresión cuyos operandos vuelven a dar exactamente a y b

    El operando derecho se copia del display ("3." se guarda como "3").
    El izquierdo se formatea con la precisión del display y, si así pierde
    cifras (por ejemplo 0.1 + 0.2 encadenado), se amplía hasta 17 dígitos.
    """
    if display.endswith("."):
        display = display[:-1]
    return f"{operand_text(a, precision)} {op} {display}"


def operand_text(value, precision=DEFAULT_PRECISION):
    """Texto más corto, desde `precision` dígitos, que se lee como value."""
    for digits in range(precision, 18):
        text = format_number(value, digits)
        if float(text) == value:
            return text
    return repr(value)


def describe_pending(state, precision=DEFAULT_PRECISION):
    """
    Línea secundaria del display mientras hay una operación pendiente.

    Returns:
        str: "5 +" con operador pendiente, "" en otro caso
    """
    if state.previous_value is None or state.operation is None:
        return ""
    return f"{format_number(state.previous_value, precision)} {state.operation}"


def phase(state):
    """
    Fase del autómata codificada implícitamente en el estado.

    Tabla:
        - error: display == "Error"
        - operator_pending: operando izquierdo fijado y esperando el derecho
        - operand: se está tecleando un operando (izquierdo o derecho)
        - result: se acaba de mostrar un resultado
        - idle: estado inicial con display "0"
    """
    if state.is_error:
        return PHASE_ERROR
    if state.previous_value is not None:
        return PHASE_OPERATOR_PENDING if state.waiting_for_operand else PHASE_OPERAND
    if state.waiting_for_operand:
        return PHASE_RESULT
    return PHASE_IDLE if state.display == "0" else PHASE_OPERAND


# ============================================================================
# CLASE: Calculator
# Propósito: Sesión de calculadora con estado e historial
# Responsabilidades:
#   - Guardar el estado actual (único escritor)
#   - Aplicar eventos mediante el reductor puro
#   - Convertir cada cálculo completado en una entrada de historial
# ============================================================================
class Calculator:
    """
    Sesión de calculadora.

    Modelo de operación:
        1. La interfaz traduce teclas y clics a eventos (Digit, Operator...)
        2. press() aplica el evento y guarda el nuevo estado
        3. Si el evento completó un "=", se crea un HistoryEntry y se entrega
           al historial con append() (sin esperar a que se escriba)

    El historial es cualquier objeto con append(entry) y load_all();
    si es None, los cálculos no se registran.
    """

    def __init__(self, history=None, precision=DEFAULT_PRECISION):
        """
        Args:
            history: Colaborador de historial (HistoryStore o HistoryWriter)
            precision (int): Dígitos significativos de los resultados
        """
        self.history = history
        self.precision = precision
        self.state = INITIAL_STATE

    def press(self, event):
        """
        Aplica un evento de entrada.

        Args:
            event: Evento de entrada

        Returns:
            HistoryEntry|None: Entrada creada si el evento completó un cálculo
        """
        self.state, calculation = transition(self.state, event, self.precision)
        if calculation is None:
            return None

        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            expression=calculation.expression,
            result=calculation.result,
            timestamp=datetime.now(timezone.utc),
        )
        if self.history is not None:
            self.history.append(entry)
        return entry

    def reset(self):
        self.state = INITIAL_STATE

    @property
    def phase(self):
        return phase(self.state)

    def get_display(self):
        return self.state.display

    def get_expression(self):
        """Expresión pendiente para el display secundario ("12 ×")."""
        return describe_pending(self.state, self.precision)
