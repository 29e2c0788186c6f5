"""Realtime presence registry and event relay.

The core (registry, router, call tracker, chat delivery) is transport-free:
handlers return ``Delivery`` records and ``gateway`` emits them over Socket.IO.
"""
