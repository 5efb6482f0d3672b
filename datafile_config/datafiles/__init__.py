"""Sample datafiles bundled with the package"""
