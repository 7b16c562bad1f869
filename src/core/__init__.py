"""
Módulo core con la lógica principal de la calculadora.
Contiene el reductor de estados, los eventos de entrada y el mapa de teclas.
"""

from .calculator import (AllClear, Backspace, Calculator, CalculatorState, Clear,
                         Decimal, Digit, Equals, Operator, INITIAL_STATE, apply,
                         evaluate, format_number, transition)
from .keymap import command_for_key, event_for_button, event_for_key

__all__ = ['AllClear', 'Backspace', 'Calculator', 'CalculatorState', 'Clear',
           'Decimal', 'Digit', 'Equals', 'Operator', 'INITIAL_STATE', 'apply',
           'evaluate', 'format_number', 'transition', 'command_for_key',
           'event_for_button', 'event_for_key']
