"""adquery: list Active Directory users and dump one user's attributes."""
