"""
Services module for the Assessment Results Engine.
"""
