"""
Core value types, number systems, and contracts.

Everything here is independent of the front end: exact rationals, the
binary64 shadow, decimal expansions, expression trees, and the records an
evaluation outcome is serialized to.
"""
