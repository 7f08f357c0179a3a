from .cart import CartView

__all__ = ["CartView"]
