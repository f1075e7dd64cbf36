"""
UTILITIES PACKAGE
=================

Helpers used by the services (no HTTP, no business logic):

  rwlock    - ReadWriteLock: many readers or one writer (guards the history store).
  time_info - utc_now() / utc_timestamp(): timestamps for turns and API responses.
"""
