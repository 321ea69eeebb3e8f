"""Ratings app package.

Guests rate properties (one rating per user and property). Every rating
write recomputes the property's rollup (``avg_rating``,
``total_ratings``) from the stored ratings in the same transaction.
"""
