"""
vaultsync command-line interface.
"""
