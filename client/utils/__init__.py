"""
Client utilities: configuration, logging and identity persistence.
"""
