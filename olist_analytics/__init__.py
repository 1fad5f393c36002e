"""
Olist E-Commerce Analytics

Business metrics over the Brazilian e-commerce public dataset.
"""

__version__ = "1.0.0"
