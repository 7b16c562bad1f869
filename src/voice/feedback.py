"""
Sistema de feedback por voz usando pyttsx3.

Este módulo anuncia en voz alta cada tecla pulsada y cada resultado,
ejecutándose en un hilo aparte para no bloquear la ventana.
"""

import threading
from collections import deque

import pyttsx3

from core.calculator import (AllClear, Backspace, Clear, Decimal, Digit, Equals,
                             Operator, ADD, SUBTRACT, MULTIPLY, DIVIDE, ERROR_DISPLAY)


NUMBERS_ES = {
    0: "cero", 1: "uno", 2: "dos", 3: "tres", 4: "cuatro",
    5: "cinco", 6: "seis", 7: "siete", 8: "ocho", 9: "nueve",
}

OPERATIONS_ES = {
    ADD: "más",
    SUBTRACT: "menos",
    MULTIPLY: "por",
    DIVIDE: "dividido entre",
}

# Voces preferidas por orden: naturales de Apple, luego Eloquence
NATURAL_VOICES = ['monica', 'paulina', 'jorge', 'juan', 'diego']
ELOQUENCE_VOICES = ['eddy', 'flo', 'reed', 'sandy', 'shelley']


# ============================================================================
# CLASE: VoiceFeedback
# Propósito: Síntesis de voz para feedback auditivo
# Responsabilidades:
#   - Sintetizar en el idioma configurado las teclas y resultados
#   - Ejecutar en hilo separado para no bloquear la UI
#   - Gestionar cola de mensajes para evitar solapamiento
# ============================================================================
class VoiceFeedback:
    """
    Feedback por voz de la calculadora.

    Características:
        - Ejecución asíncrona (no bloquea la ventana)
        - Cola acotada de mensajes (se descartan los más antiguos)
        - Volumen y velocidad tomados de CalculatorConfig
        - Si pyttsx3 no arranca, la voz queda desactivada
    """

    def __init__(self, config):
        """
        Inicializa el motor de síntesis de voz.

        Args:
            config (CalculatorConfig): Configuración de la calculadora
        """
        self.config = config
        self.engine = None
        self.is_speaking = False
        self.message_queue = deque(maxlen=5)
        self._lock = threading.Lock()
        self._init_failed = False

        if config.voice_enabled:
            self._ensure_engine()

    def _ensure_engine(self):
        """
        Arranca pyttsx3 la primera vez que se necesita.

        Returns:
            bool: True si hay motor de voz disponible
        """
        if self.engine is not None:
            return True
        if self._init_failed:
            return False
        try:
            self.engine = pyttsx3.init()
            self._configure_engine()
            print("✓ Sistema de voz inicializado correctamente")
            return True
        except Exception as e:
            print(f"⚠ Advertencia: No se pudo inicializar el sistema de voz: {e}")
            self._init_failed = True
            self.engine = None
            self.config.voice_enabled = False
            return False

    def is_available(self):
        """True si pyttsx3 arrancó (o arranca ahora) correctamente."""
        return self._ensure_engine()

    def _configure_engine(self):
        """Aplica volumen, velocidad y la mejor voz disponible del idioma."""
        self.engine.setProperty('volume', self.config.voice_volume)
        self.engine.setProperty('rate', self.config.voice_rate)

        voice = self._find_voice(self.engine.getProperty('voices'))
        if voice is None:
            print(f"⚠ No se encontró voz para '{self.config.voice_language}'. Usando voz predeterminada.")
            return
        self.engine.setProperty('voice', voice.id)
        print(f"✓ Voz seleccionada: {voice.name}")

    def _find_voice(self, voices):
        """
        Busca la voz más natural para el idioma configurado.

        Prioridad:
            1. Voces naturales de Apple (id con 'compact')
            2. Voces Eloquence del idioma ('es-' en el id)
            3. Cualquier voz cuyo id o idiomas mencionen el idioma
        """
        language = self.config.voice_language.lower()

        for voice in voices:
            name, voice_id = voice.name.lower(), voice.id.lower()
            if 'compact' in voice_id and any(n in name for n in NATURAL_VOICES):
                return voice

        for voice in voices:
            name, voice_id = voice.name.lower(), voice.id.lower()
            if f'{language}-' in voice_id and any(n in name for n in ELOQUENCE_VOICES):
                return voice

        for voice in voices:
            languages = [str(lang).lower() for lang in getattr(voice, 'languages', [])]
            if language in voice.id.lower() or any(language in lang for lang in languages):
                return voice
        return None

    def speak(self, text):
        """
        Encola un mensaje y arranca el hilo de reproducción si está parado.

        Args:
            text (str): Texto a sintetizar
        """
        if not self.config.voice_enabled or not self._ensure_engine():
            return

        with self._lock:
            self.message_queue.append(text)
            if self.is_speaking:
                return
            self.is_speaking = True

        thread = threading.Thread(target=self._process_queue, daemon=True)
        thread.start()

    def _process_queue(self):
        """Procesa la cola de mensajes uno por uno."""
        while True:
            with self._lock:
                if not self.message_queue:
                    self.is_speaking = False
                    return
                message = self.message_queue.popleft()
            try:
                self.engine.say(message)
                self.engine.runAndWait()
            except Exception as e:
                print(f"⚠ Error al reproducir voz: {e}")

    def speak_digit(self, digit):
        self.speak(NUMBERS_ES.get(digit, str(digit)))

    def speak_operation(self, operation):
        self.speak(OPERATIONS_ES.get(operation, operation))

    def speak_result(self, display):
        """
        Anuncia el resultado mostrado en el display.

        Args:
            display (str): Texto del display ("3.5", "Error"...)
        """
        if display == ERROR_DISPLAY:
            self.speak("error de cálculo")
            return
        text = display.replace('-', 'menos ').replace('.', ' coma ')
        self.speak(f"igual a {text}")

    def speak_event(self, event, display):
        """
        Anuncia un evento ya aplicado.

        Args:
            event: Evento de la calculadora
            display (str): Display tras aplicar el evento
        """
        if isinstance(event, Digit):
            self.speak_digit(event.digit)
        elif isinstance(event, Operator):
            self.speak_operation(event.symbol)
        elif isinstance(event, Decimal):
            self.speak("coma")
        elif isinstance(event, Equals):
            self.speak_result(display)
        elif isinstance(event, AllClear):
            self.speak("todo borrado")
        elif isinstance(event, Clear):
            self.speak("borrado")
        elif isinstance(event, Backspace):
            self.speak("retroceso")
