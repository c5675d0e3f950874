"""
Realtime Module for InfraSim
============================
Run lifecycle registry and event fan-out to run and tenant subscribers.
"""
