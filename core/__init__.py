# Core package - foundational components
#
# Modules:
# - config: Application settings
# - logging: Structured logging
# - storage: Typed collection storage (JSON files, in-memory) with TTL cache
