"""Adaptadores a herramientas externas (subprocess, httpx, sondas de descubrimiento)."""
