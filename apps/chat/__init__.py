"""Chat app package.

Each booking owns exactly one conversation: an append-only message log
between the guest and the property owner, addressed from outside only
by its UUID.
"""
