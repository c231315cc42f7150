"""
StackFit Email Package.

Modules:
- core: Base send_email function (log-only delivery)
- membership: Renewal reminder and overdue templates
"""
