import functools


def synchronized(wrapped):
    """Serializes calls on the same instance, the instance must own a ``_lock`` (threading.Lock or RLock).

    Unlike a module-wide lock, two different instances never block each other."""

    @functools.wraps(wrapped)
    def _wrapper(self, *args, **kwargs):
        with self._lock:
            return wrapped(self, *args, **kwargs)
    return _wrapper
