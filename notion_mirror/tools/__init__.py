"""
Configuration and command line interface.
"""
