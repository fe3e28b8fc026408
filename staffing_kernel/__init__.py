"""
Staffing Kernel

The in-memory core of the resource-staffing dashboard:
- Entity model for projects, staff and assignments
- Replace-on-write store with consistent read snapshots
- Typed exceptions with machine-readable codes
- Structured JSON logging and an injectable clock
"""

__version__ = "0.1.0"
