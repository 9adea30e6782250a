"""
Core domain models, fixed-point math, contracts and errors.

Building blocks that are independent of the pool/vault/controller
collaborators.
"""
