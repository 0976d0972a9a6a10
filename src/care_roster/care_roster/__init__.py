"""Care-agency rostering core.

Organized by feature (rosters, shifts, attendance, payroll) with a thin Flask
controller layer over service and repository layers. Users and company
settings are read-only collaborators.
"""
