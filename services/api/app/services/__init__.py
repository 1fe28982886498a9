"""Business logic services.

Services sit between routes and repositories: routes stay thin, storage
details stay in the repositories.
"""
