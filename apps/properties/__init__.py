"""Properties app package.

This app encapsulates property listings: the property model with its
owner-controlled availability flag and derived rating rollup, and the
read-only availability projection over the booking calendar.
"""
