"""
modpurger: retention enforcement for substreams module caches.

Finds stale or poisoned module cache artifacts from the metadata store
and removes them from bucket storage in bulk, behind safety checks.
"""

__version__ = "0.1.0"
