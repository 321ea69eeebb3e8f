"""Bookings app package.

This app encapsulates the booking domain: the booking model and its
status machine, pricing, the availability guard over the property
calendar and the command handlers that admit, update and cancel
bookings. Every calendar write runs in one transaction holding a row
lock on the parent property.
"""
