"""
App Store listing crawler and contact email harvester.
"""
