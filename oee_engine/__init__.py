"""Motor de cálculo OEE (Quality x Performance x Availability) por activo."""

__version__ = "0.1.0"
