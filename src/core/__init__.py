"""Core: dominio, contratos y pipeline del reporte de placements.

No depende de HTTP ni de la CLI; los adaptadores implementan sus interfaces.
"""
