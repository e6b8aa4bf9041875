# OIDC service application package
