"""Modelos y entidades de dominio.

Por qué:
- Estructuras de datos puras y estrictas (Pydantic v2).
- El dominio no sabe nada de subprocesos, Jupyter ni la CLI.
"""
