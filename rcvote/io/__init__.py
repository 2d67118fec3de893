"""Export of election data to files: BLT ballot files and audit logs.

This subpackage is structured into modules by file format.
"""
