"""Media móvil por minuto de los tiempos de entrega de traducciones."""

__version__ = "1.0.0"
