"""
Módulo de la aplicación principal.
Contiene la clase que integra calculadora, historial, voz y ventana.
"""

from .calculator_app import CalculatorApp

__all__ = ['CalculatorApp']
