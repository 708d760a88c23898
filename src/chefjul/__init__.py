"""
Chef Jul - LLM-backed meal planning.

Generates weekly meal plans, per-meal recipes, and cooking answers.
Meal plans are stored per user and ISO week.
"""

__version__ = "1.0.0"
