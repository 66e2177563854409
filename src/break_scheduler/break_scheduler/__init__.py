"""Break Scheduler package.

Computes break windows from an agent's shift, decides which break
notification applies at a given instant and dispatches each one exactly once.
Organized by feature modules (shifts, breaks, notifications, reminders) with
repository Protocols, MySQL repositories and a thin Flask controller layer.
"""
