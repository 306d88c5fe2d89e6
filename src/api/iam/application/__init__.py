"""IAM application layer.

Keeps the authorization store in step with the relational system of record.
"""
