"""
Módulo de configuración de la calculadora.
Contiene la clase de configuración con precisión, voz, historial y ventana.
"""

from .settings import CalculatorConfig

__all__ = ['CalculatorConfig']
