"""Core constants: per-operation timeout budgets and client defaults.

Budgets are in seconds and bound every backend call made by a session.
"""

# Health check (PING) on connect
TIMEOUT_HEALTH_CHECK = 2.0
# Single-key reads and single-key deletes
TIMEOUT_READ = 5.0
# Writes, counters, key listing and multi-key deletes
TIMEOUT_WRITE = 10.0
# KEYS + DEL as one logical operation
TIMEOUT_PATTERN_DELETE = 15.0

# Transport-level retries configured on the Redis client (not this layer)
DEFAULT_MAX_RETRIES = 3
# Idle connections are health-checked after this many seconds
DEFAULT_IDLE_TIMEOUT_SECONDS = 120
