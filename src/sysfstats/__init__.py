"""sysfstats - periodic device-health collector for sysfs counters."""

__version__ = "0.1.0"
