"""
Chef Jul Web API.

Run with: chefjul serve
"""
