"""Servidor HTTP (FastAPI) que publica el reporte."""
