"""
Udyam - Motor de formularios multi-paso para el registro de empresas MSME.

Los pasos, campos y reglas de validación se derivan de un esquema
declarativo (obtenido por scraping del portal) en lugar de estar
codificados a mano.
"""

__version__ = "0.1.0"
