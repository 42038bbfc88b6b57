"""
Binance Client
==============

Async client for the Binance spot and USD-M futures APIs.

Modules:
    execution: Signed REST transport, response decoding and market clients
    data: Request/response models, stream events and the WebSocket connector
    utils: Configuration, logging and secret handling
"""

__version__ = "0.1.0"
