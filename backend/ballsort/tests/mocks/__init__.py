from ballsort.tests.mocks.connection import MockConnection, SlowConnection

__all__ = ["MockConnection", "SlowConnection"]
