"""
Shared Kernel

Base classes and infrastructure shared by every StayHub app:
domain events, value objects, the domain error taxonomy, the message
bus and the Django unit of work.
"""
