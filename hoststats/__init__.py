"""
hoststats - Host capacity statistics for vSphere fleets.

Collects CPU, memory, model and version information for every physical host
managed by a set of vCenter (or standalone ESXi) endpoints and consolidates
the results into a single tabular file.
"""

VERSION = "1.0.0"
__version__ = VERSION
