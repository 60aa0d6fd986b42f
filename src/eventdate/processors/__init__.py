"""Data Processing Module

Processors interpreting the recorded fields of occurrence records.
"""
