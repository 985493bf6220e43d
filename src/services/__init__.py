"""Business logic services used by handlers.

Services are built lazily by handlers (see ``services.factory``) so that
importing a handler never opens a database or auth connection.
"""

# Do NOT import services here - use lazy loading in handlers instead
