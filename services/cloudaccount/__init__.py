"""
Lifecycle management for vSphere cloud-account registrations in a vRA control plane.
"""
