"""Queries and updates for each kind of stored record."""