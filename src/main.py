"""
Punto de entrada de la calculadora.

Uso:
    python3 src/main.py
    python3 src/main.py --historial ./historial.json --sin-voz
    calculadora --precision 10
"""

import argparse
import sys
import traceback

from app.calculator_app import CalculatorApp
from config.settings import CalculatorConfig


def parse_args(argv=None):
    """
    Lee las opciones de línea de comandos.

    Args:
        argv (list): Argumentos (por defecto, sys.argv[1:])

    Returns:
        argparse.Namespace: historial, sin_historial, sin_voz, precision
    """
    parser = argparse.ArgumentParser(
        prog="calculadora",
        description="Calculadora aritmética con teclado, ratón e historial",
    )
    parser.add_argument("--historial", metavar="RUTA", default=None,
                        help="fichero JSON del historial (por defecto ~/.calculadora/historial.json)")
    parser.add_argument("--sin-historial", action="store_true",
                        help="no guardar los cálculos en disco")
    parser.add_argument("--sin-voz", action="store_true",
                        help="desactivar el feedback por voz")
    parser.add_argument("--precision", type=int, default=None,
                        help="cifras significativas de los resultados (1-17)")
    args = parser.parse_args(argv)

    if args.precision is not None and not 1 <= args.precision <= 17:
        parser.error("--precision debe estar entre 1 y 17")
    return args


def build_config(args):
    """Configuración por defecto con las opciones de línea de comandos aplicadas."""
    config = CalculatorConfig()
    if args.historial:
        config.history_file = args.historial
    if args.sin_historial:
        config.history_enabled = False
    if args.sin_voz:
        config.voice_enabled = False
    if args.precision is not None:
        config.significant_digits = args.precision
    return config


def main(argv=None):
    """
    Arranca la aplicación.

    Manejo de errores:
        - KeyboardInterrupt (Ctrl+C): Cierre graceful por usuario
        - Exception general: Muestra el error con traceback y sale con código 1

    Returns:
        int: Código de salida
    """
    args = parse_args(argv)
    try:
        app = CalculatorApp(build_config(args))
        app.run()
    except KeyboardInterrupt:
        print("\nInterrumpido por el usuario")
    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        return 1
    return 0


# ============================================================================
# PUNTO DE ENTRADA PRINCIPAL
# ============================================================================
if __name__ == "__main__":
    sys.exit(main())
