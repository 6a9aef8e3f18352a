"""Core: configuración, modelos de dominio y servicios de cada paso."""
