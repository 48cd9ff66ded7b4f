"""Catalog app package.

This app holds the durable record of bookable resources: parents
(hotels, trains), their children (rooms, route offerings) and the
bookable units. It also keeps the parent/child links consistent and
answers route and name lookups.
"""
