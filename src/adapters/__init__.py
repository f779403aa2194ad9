"""Adaptadores de infraestructura.

Por qué un paquete aparte:
- Agrupa el I/O (Cloud Controller vía httpx, HTML vía Jinja2, JSON).
- El Core solo ve `PlatformClient` y los modelos de dominio.
"""
