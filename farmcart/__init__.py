"""farmcart - storefront cart synchronization for a livestock and meat marketplace."""

__version__ = "0.1.0"
