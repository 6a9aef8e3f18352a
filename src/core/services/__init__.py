"""Servicios de cada paso del setup, un módulo por paso."""
