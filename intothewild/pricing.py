# -*- coding: utf-8 -*-
"""
Indian pricing helpers.
"""

GST_RATE = 0.18 # standard 18% GST

def calculate_gst_price(amount: float) -> int:
    """
    Returns the amount with GST added, rounded to whole rupees.

    >>> calculate_gst_price(100)
    118
    """
    return int(round(amount * (1 + GST_RATE)))

def tent_rental_cost(price_per_night: float, quantity: int, nights: int) -> int:
    return calculate_gst_price(price_per_night * quantity * nights)
