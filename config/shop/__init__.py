"""
Shop App - WingaPlus
Ventas, garantías y catálogo para tiendas de teléfonos y accesorios
"""

__version__ = '1.0.0'

