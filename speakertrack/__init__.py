"""
speakertrack - active speaker detection from face mesh landmarks.
"""

__version__ = "1.0.0"
