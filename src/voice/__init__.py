"""
Módulo de síntesis de voz.
Contiene el feedback auditivo de teclas y resultados.
"""

from .feedback import VoiceFeedback

__all__ = ['VoiceFeedback']
