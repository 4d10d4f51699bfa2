"""
Vending Machine Backend

Transactional core of a vending machine: denomination catalog, cash float,
product stock and the order state machine, exposed over a FastAPI service.
"""

__version__ = "1.0.0"
