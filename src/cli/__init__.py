"""Interfaz de línea de comandos (typer + rich)."""
