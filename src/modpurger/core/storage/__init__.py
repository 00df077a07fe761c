"""Object storage backends and bounded listing."""

from modpurger.core.storage.lister import DEFAULT_LIST_TIMEOUT_SECONDS, ObjectLister

__all__ = ["DEFAULT_LIST_TIMEOUT_SECONDS", "ObjectLister"]
