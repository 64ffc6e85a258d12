"""
Services Module

Business logic behind the routers:
- users: registration, confirmation, login, follow graph, delete cascade
- events: event lifecycle, membership, edit-rights policy
- availabilities: per-user availability records
- mailer: confirmation emails over SMTP
"""
