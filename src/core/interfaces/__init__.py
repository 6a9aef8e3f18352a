"""Interfaces del Core.

Por qué:
- Contratos (Protocol) que implementan los adaptadores concretos.
- El core depende de abstracciones, así los tests sustituyen procesos y
  sondas del filesystem por fakes.
"""
