"""
Use Cases

Organized by domain folder:
- auth/: Registration, login and token flows
- users/: Signed-in account self-service
- security/: Password and second-factor changes that end every session
"""
