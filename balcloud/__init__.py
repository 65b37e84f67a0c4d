"""
balcloud - code to cloud artifact generation for Ballerina packages.

Scans listener, service and task declarations in Ballerina source and
derives Kubernetes manifests and a Docker build context from them.
"""

__version__ = "0.1.0"
__author__ = "balcloud maintainers"
