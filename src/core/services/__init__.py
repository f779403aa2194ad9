"""Servicios del Core (orquestación del reporte)."""
