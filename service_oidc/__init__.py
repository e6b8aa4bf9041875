"""
OIDC service: validates OpenID Connect ID tokens issued by registered providers.
"""
