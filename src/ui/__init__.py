"""
Módulo de interfaz de usuario.
Contiene el renderizador del display, la rejilla de botones y el historial.
"""

from .renderer import UIRenderer

__all__ = ['UIRenderer']
